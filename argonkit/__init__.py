"""Version checks, Link header parsing, JSON formatting, typed field access, event debouncing and archive helpers."""

__version__ = "0.1.0"