# setup.py
"""Setup script for the photo frame engine."""

import os

from setuptools import setup, find_packages

setup(
    name="photo-frame-engine",
    version="1.0.0",
    description="Event-sourced photo registry, reconciler and display scheduler for a digital photo frame",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Photo Frame Team",
    packages=find_packages(exclude=["*.tests", "*.tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "Pillow>=8.0.0",
        "tqdm>=4.50.0",
        "requests>=2.25.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0.0",
            "pytest-cov>=2.10.0",
            "pytest-mock>=3.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "photo-frame=photo_frame.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Multimedia :: Graphics",
    ],
)
