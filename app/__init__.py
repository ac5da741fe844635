"""Compliance evaluation and readiness scoring service."""

__version__ = "0.1.0"
