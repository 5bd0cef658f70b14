"""fieldguard: metadata-driven field validation dispatch."""

__version__ = "0.1.0"
