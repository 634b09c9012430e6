"""Lifeline: pluggable object storage for workspace snapshot artifacts."""

__version__ = "1.0.0"
