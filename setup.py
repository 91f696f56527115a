#!/usr/bin/env python3
"""
Setup configuration for lyrics-helper
Lyric format conversion with metadata stripping, syllable smoothing and singer recognition
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "click>=8.1.7",
    "rich-click>=1.7.0",
    "pyyaml>=6.0.1",
    "tqdm>=4.66.1",
    "rapidfuzz>=3.5.0",
    "opencc>=1.1.7",
]

setup(
    name="lyrics-helper",
    version="0.1.0",
    author="lyrics-helper Team",
    description="Convert timed lyrics between LRC, enhanced LRC, TTML and plain text, and clean them up on the way",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["lyrics_helper", "lyrics_helper.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Text Processing :: Markup :: XML",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
        "test": [
            "pytest>=7.4.3",
        ],
    },
    entry_points={
        "console_scripts": [
            "lyrics-helper=lyrics_helper.cli:main",
        ],
    },
    include_package_data=True,
    package_data={
        "lyrics_helper": ["processors/*.yaml"],
    },
    keywords="lyrics lrc ttml karaoke subtitles converter opencc cli",
)
