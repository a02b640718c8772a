# This project was developed with assistance from AI tools.
"""Onboarding portal REST backend."""

__version__ = "0.1.0"
