"""
transcript-chain — setuptools build script.

Usage:
    # Development install:
    pip install -e .

    # With the whisper speech-to-text fallback:
    pip install -e ".[stt]"

External tools invoked at runtime: yt-dlp (installed as a dependency),
whisper (from the optional "stt" extra), ffmpeg (system package, used by
yt-dlp and whisper).
"""

from setuptools import setup, find_namespace_packages

APP_NAME = "transcript-chain"

setup(
    name=APP_NAME,
    version="1.0.0",
    description="YouTube transcript acquisition with multi-source fallback",
    packages=find_namespace_packages(include=["transcript_chain", "transcript_chain.*"]),
    py_modules=["main"],
    install_requires=[
        "requests>=2.28.0",
        "youtube-transcript-api>=1.0.0",
        "yt-dlp>=2024.1.0",
    ],
    extras_require={
        "stt": ["openai-whisper"],
    },
    entry_points={
        "console_scripts": [
            "transcript-chain=main:main",
        ],
    },
    python_requires=">=3.10",
)
