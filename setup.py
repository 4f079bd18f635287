"""Setup configuration for SecretSync."""

import os
import sys

from setuptools import find_packages, setup

# Get version from package
here = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, here)
try:
    from secretsync import __author__, __version__
except ImportError:
    __version__ = "0.1.0"
    __author__ = "SecretSync Team"

# Get the long description from the README file
with open(os.path.join(here, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="secretsync",
    version=__version__,
    description="Keeps annotated secrets generated and rotated inside maintenance windows",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author=__author__,
    keywords="secrets rotation kubernetes operator maintenance-window",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "click>=8.0.0",
        "pyyaml>=6.0",
        "cryptography>=3.4.0",
        "jsonschema>=4.0.0",
        "tzdata>=2023.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.12.0",
            "mypy>=0.991",
        ],
    },
    entry_points={
        "console_scripts": [
            "secretsync=secretsync.cli:cli",
        ],
    },
)
