"""Labour cost engine: pay, employer cost and forecast calculations for shift-based staff."""

__version__ = "0.1.0"
