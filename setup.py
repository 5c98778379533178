"""Setup script for mm1-queue-sim."""

from setuptools import setup, find_packages

setup(
    name="mm1-queue-sim",
    version="0.1.0",
    description="Discrete-event simulation of a single-server M/M/1 queue",
    author="MM1 Queue Sim",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pandas",
        "matplotlib",
        "simpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "run-simulation=scripts.run_simulation:main",
        ],
    },
)
