"""HomeIndex - index personal documents and photos into a searchable store."""

__version__ = "0.1.0"
