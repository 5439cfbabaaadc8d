"""ArangoDB catalog query runner."""

__version__ = "0.1.0"
