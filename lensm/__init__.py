"""Source positions, architecture tables and XCOFF object and archive readers."""

__version__ = "0.1.0"