"""Proximity request/transfer simulation."""

__version__ = "0.1.0"
