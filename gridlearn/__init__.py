"""Typed, byte-packed data grids with CSV, ARFF and archive input and output."""

__version__ = "0.1.0"