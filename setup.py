#!/usr/bin/env python3
"""Setup script for the Content Curation Engine."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="content-curation-engine",
    version="0.1.0",
    author="Content Curation Team",
    author_email="team@example.com",
    description="Deduplicates multi-feed content batches and ranks them against user profiles",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: Indexing/Search",
        "Topic :: Text Processing :: Linguistic",
    ],
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5",
        "pydantic-settings>=2.2",
        "structlog>=24.1",
        "orjson>=3.10",
        "click>=8.1",
        "pyyaml>=6.0",
        "rich>=13.7.1",
        "rapidfuzz>=3.6",
    ],
    extras_require={
        "dev": [
            "pytest>=8.2",
            "ruff>=0.4",
            "mypy>=1.10",
            "coverage>=7.5",
            "pytest-cov>=4.1",
        ]
    },
    entry_points={
        "console_scripts": [
            "content-curation=content_curation.cli:cli",
        ],
    },
    include_package_data=True,
    package_data={
        "content_curation": ["*.yaml"],
    },
)
