"""Booking backend for pools, tennis courts and pickleball courts."""

__version__ = "0.1.0"
