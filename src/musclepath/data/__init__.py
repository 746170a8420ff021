"""Bundled content and the catalog loader."""
