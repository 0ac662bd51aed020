"""Carbon-aware job scheduling services."""

__version__ = "0.1.0"