"""Bark event recorder and timeline viewer."""

__version__ = "0.3.0"
