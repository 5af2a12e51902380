"""Run the system ping command and parse its output into results."""

__version__ = "2.0.0"