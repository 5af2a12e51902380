"""Ping, but with a graph: plot round-trip times of hosts or commands in the terminal."""

__version__ = "1.19.0"