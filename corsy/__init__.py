"""Corsy - CORS misconfiguration scanner."""

__version__ = "0.1.0"
