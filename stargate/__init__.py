"""Stargate duty service — personnel and astronaut duty-assignment history."""

__version__ = "1.0.0"
