"""Automated reversed penny challenge for Monzo pots."""

__version__ = "0.1.0"
