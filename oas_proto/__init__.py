"""Translate OpenAPI component schemas into flat proto3 definitions."""

__version__ = "0.1.0"
