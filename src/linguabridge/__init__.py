"""LinguaBridge: translated message relay between linked Discord channels."""

__version__ = "0.1.0"
