"""git-tracer: track git commits across multiple repositories."""

__version__ = "1.0.0"
