"""Vesper: screenplay parsing, pattern analysis and outline generation."""

__version__ = "0.1.0"
