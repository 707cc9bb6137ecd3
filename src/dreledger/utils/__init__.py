"""Utility functions for dreledger."""

from dreledger.utils.date_parser import parse_date, parse_record_date
from dreledger.utils.amount_parser import parse_amount, coerce_amount
from dreledger.utils.record_resolver import resolve_record

__all__ = [
    "parse_date",
    "parse_record_date",
    "parse_amount",
    "coerce_amount",
    "resolve_record",
]
