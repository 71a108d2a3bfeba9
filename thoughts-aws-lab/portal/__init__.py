"""Thoughts Portal: serverless thought submission API and its command-line client."""

__version__ = "0.1.0"
