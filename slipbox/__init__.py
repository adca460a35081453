"""Capture, edit and restructure Org notes in a slipbox directory."""

__version__ = "0.2.0"

__all__ = [
    "model",
    "paths",
    "outline",
    "properties",
    "document",
    "content",
    "notes",
    "pipeline",
    "metadata",
    "rewrite",
]