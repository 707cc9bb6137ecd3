"""Shared domain error messages and error types."""

from typing import Iterable


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConfigurationIntegrityError(DomainError):
    """Category dictionary and report group enumeration have drifted apart."""


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category '{category_id}' not found"


def duplicate_category_name(name: str) -> str:
    """Return message for a category name that already exists."""
    return f"Category with name '{name}' already exists"


def duplicate_record_id(kind: str, record_id: str) -> str:
    """Return message for a record ID that already exists."""
    return f"{kind} '{record_id}' already exists"


def unknown_report_group(value: object) -> str:
    """Return message for a report group outside the enumeration."""
    return f"Unknown report group '{value}'"


def report_group_drift(category_ids: Iterable[str]) -> str:
    """Return message when categories declare groups outside the enumeration."""
    ids = ", ".join(sorted(category_ids))
    return (
        f"Categories declare report groups outside the DRE structure: {ids}. "
        "Fix or re-import them before running the report."
    )


def invalid_reference_month(month: int) -> str:
    """Return message for a reference month outside 1..12."""
    return f"Reference month must be between 1 and 12, got {month}"


def non_positive_amount(amount: object) -> str:
    """Return message for an amount that must be positive."""
    return f"Amount must be greater than zero, got {amount}"
