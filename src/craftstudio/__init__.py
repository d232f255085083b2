"""Craft Studio: multi-angle product design generation with consistency enforcement."""

__version__ = "0.3.0"
