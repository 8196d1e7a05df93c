"""clusterview: threshold-driven clustering of weighted item graphs."""

__version__ = "0.1.0"
