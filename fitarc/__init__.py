"""FitArc plan resolution engine."""

__version__ = "0.3.0"
