"""Switch laptop display modes: internal, external, clone, presentation."""

__version__ = "0.3.0"
