"""The Brain - target collection, CORS analysis and scan orchestration."""

from corsy.brain.cors import analyze_cors
from corsy.brain.targets import TargetSourceError, load_urls

__all__ = ["analyze_cors", "load_urls", "TargetSourceError"]
