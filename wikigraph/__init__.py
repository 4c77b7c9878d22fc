"""Wikigraph: content graph and revision engine of a markdown knowledge base."""

__version__ = "0.1.0"
