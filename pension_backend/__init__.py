"""Retirement funding and payout backend."""

__version__ = "0.1.0"
