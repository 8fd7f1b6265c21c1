"""Boundaries to documents on disk and the remote SDK service."""
