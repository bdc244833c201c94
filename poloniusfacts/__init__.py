"""Interning, loading, parsing and visualization of borrow-checker facts."""

__version__ = "0.1.0"
__all__ = ["dump", "facts", "intern", "ir", "liveness", "parser", "program", "tab_delim"]