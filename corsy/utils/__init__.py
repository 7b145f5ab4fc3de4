"""Shared helpers - configuration loading."""
