"""Sorteio Admin web application package."""

__version__ = "1.4.0"
