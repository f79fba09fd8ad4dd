"""Readers for classic game volume archives, palettes, MDL models and OBJ output."""

__version__ = "0.1.0"