"""Utility for resolving record names to IDs."""

from typing import Iterable, Protocol

from dreledger.domain.errors import NotFoundError


class NamedRecord(Protocol):
    id: str
    name: str


def resolve_record(records: Iterable[NamedRecord], reference: str, kind: str) -> str:
    """Resolve a record name or ID to its ID.

    An exact ID match wins; otherwise names are compared ignoring case.

    Args:
        records: Candidate records (categories, institutions, cards, assets)
        reference: Record ID or name
        kind: Record kind, used in the error message

    Returns:
        Record ID

    Raises:
        NotFoundError: If no record matches, or the name is ambiguous
    """
    records = list(records)
    for record in records:
        if record.id == reference:
            return record.id

    matches = [r for r in records if r.name.casefold() == reference.strip().casefold()]
    if len(matches) == 1:
        return matches[0].id
    if len(matches) > 1:
        ids = ", ".join(r.id for r in matches)
        raise NotFoundError(f"{kind} name '{reference}' is ambiguous ({ids}); use the ID")
    raise NotFoundError(f"{kind} '{reference}' not found")
