#!/usr/bin/env python3
"""crm-sync CLI - Setup"""

from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line.strip()]

setup(
    name="crm-sync",
    version="1.0.0",
    description="Deployment and setup CLI for the B2C Commerce / Salesforce Platform integration",
    author="crm-sync Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "crmsync_cli": [
            "config/*.yaml",
            "templates/*/*.j2",
        ],
    },
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "crm-sync=crmsync_cli.main:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
