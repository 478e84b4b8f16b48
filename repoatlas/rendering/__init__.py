"""Markdown rendering of atlas scan results."""

from .builder import DocumentGenerator

__all__ = ["DocumentGenerator"]
