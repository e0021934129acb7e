"""Lutobot — conversational cooking assistant backend."""

__version__ = "0.3.0"
