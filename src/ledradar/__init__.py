"""Rain detection for named places from the CHMI precipitation radar."""

__version__ = "1.0.0"
