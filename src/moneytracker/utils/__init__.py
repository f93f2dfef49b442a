"""Utility functions for moneytracker."""

from moneytracker.utils.date_parser import parse_date, resolve_timezone, local_date
from moneytracker.utils.amount_parser import parse_amount

__all__ = ["parse_date", "resolve_timezone", "local_date", "parse_amount"]
