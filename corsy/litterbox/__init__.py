"""The Litterbox - scan result reporting."""

from corsy.litterbox.reporter import ConsoleReporter, JsonReporter, load_results

__all__ = ["ConsoleReporter", "JsonReporter", "load_results"]
