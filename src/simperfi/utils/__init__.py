"""Utility functions for simperfi."""

from simperfi.utils.date_parser import parse_date, parse_timestamp
from simperfi.utils.amount_parser import parse_amount
from simperfi.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_timestamp", "parse_amount", "resolve_account"]
