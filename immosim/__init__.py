"""Rental property investment simulation for German tax rules."""

__version__ = "0.1.0"
