"""Literate execution engine: index, execute, capture, annotate."""
