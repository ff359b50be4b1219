"""REST service for a directory of people enriched with name statistics."""

__version__ = "1.0.0"