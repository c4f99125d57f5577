"""Minimal setup.py for the hstats package."""

import os
from pathlib import Path

from setuptools import find_packages, setup

# Read the version from _version.py
__version__ = ""
exec(open(os.path.join("hstats", "_version.py")).read())

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="hstats",
    version=__version__,
    description="Streaming histograms with mergeable running statistics",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["hstats", "hstats.*"], exclude=["hstats.tests", "hstats.tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Mathematics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "numpy>=2.0",
        "pandas>=2.2",
        "pydantic>=2.6",
        "pyyaml>=6.0",
        "scipy>=1.12",
        "psutil>=5.9",
        "tqdm>=4.66",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0",
            "pytest-cov>=5.0",
            "hypothesis>=6.98",
            "pylint>=3.0",
            "black>=24.1",
            "mypy>=1.8",
            "isort>=5.13",
            "types-PyYAML>=6.0.0",
        ],
    },
    entry_points={"console_scripts": ["hstats=hstats.cli:main"]},
    include_package_data=True,
    zip_safe=False,
)
