#!/usr/bin/env python3
from setuptools import setup, find_packages

setup(
    name="dashtile",
    version="0.1.0",
    description="Dashboard window tiling - a constrained grid layout engine",
    license="ISC",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pypubsub",
        "pycairo",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "dashtile=dashtile.dashboard:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: ISC License (ISCL)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
