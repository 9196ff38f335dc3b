"""Catalog admin - console for managing a content category tree."""

__version__ = "0.1.0"
