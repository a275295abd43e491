"""Utility functions for donortrack."""

from donortrack.utils.date_parser import parse_datetime, utcnow
from donortrack.utils.amount_parser import parse_amount, parse_amount_minor_units

__all__ = ["parse_datetime", "utcnow", "parse_amount", "parse_amount_minor_units"]
