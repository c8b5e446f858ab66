"""Transport route planning for school bus routes."""

__version__ = "0.1.0"
