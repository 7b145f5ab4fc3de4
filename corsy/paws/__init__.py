"""The Paws - request execution engine."""

from corsy.paws.probe import CorsProbe

__all__ = ["CorsProbe"]
