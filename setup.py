#!/bin/env python3

from setuptools import find_packages, setup

setup(
    name="FuSPiL",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=["pandas>=1.3"],
    extras_require={"MongoDB": ["pymongo"], "test": ["pytest", "pymongo"]},
    entry_points={"console_scripts": ["fuspil = fuspil.fuspil:main"]},
    description="Gene fusion detection pipeline for RNA-Seq data",
    license="MIT",
)
