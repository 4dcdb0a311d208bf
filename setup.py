"""
Setup script for the terminal_intel package.
"""
from setuptools import setup, find_packages

setup(
    name="terminal-intel",
    version="0.1.0",
    description="Generate Ollama language commanders and keep shell aliases for them in sync",
    packages=find_packages(include=["terminal_intel", "terminal_intel.*"]),
    install_requires=[
        "click>=8.0",
        "pandas>=1.4.0",
        "PyYAML>=5.4",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "terminal-intel=terminal_intel.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Environment :: Console",
    ],
)
