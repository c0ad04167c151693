"""Hotel search normalisation, booking wizard and reservation persistence."""

__version__ = "0.1.0"
