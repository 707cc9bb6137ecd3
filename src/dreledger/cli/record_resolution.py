"""CLI helpers for resolving records given by name or ID."""

from __future__ import annotations

from typing import Iterable

import click

from dreledger.cli.error_handling import handle_domain_error
from dreledger.domain.errors import NotFoundError
from dreledger.utils.record_resolver import NamedRecord, resolve_record


def resolve_or_exit(
    ctx: click.Context, records: Iterable[NamedRecord], reference: str, kind: str
) -> str:
    """Resolve a record name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_record(records, reference, kind)
    except NotFoundError as exc:
        handle_domain_error(ctx, exc)
