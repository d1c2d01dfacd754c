"""
Command-line interface for the remote model storage.

This module provides a command-line interface to:
- List gs:// model directories
- Check whether remote paths exist
- Fetch model versions into a local staging directory

Usage:
    # List the versions of a model
    remote-models ls gs://bucket/models/resnet

    # Fetch two versions, retrying the whole fetch up to 3 times
    remote-models fetch gs://bucket/models/resnet --versions 1 2 --retries 3

Options before the command configure credentials and mirroring; every
option also reads a default from the environment (or a .env file).
"""

from .cli import fetch_with_retry, main

__all__ = [
    "main",
    "fetch_with_retry",
]
