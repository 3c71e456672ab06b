"""Merge baseline records with locally staged edits."""

from __future__ import annotations

from typing import Callable, Iterable, Protocol, Sequence, TypeVar

from storefront.utils.dates import recency_key


class Record(Protocol):
    id: str

    @property
    def recency(self) -> str | None: ...


R = TypeVar("R", bound=Record)


def dedupe(records: Iterable[R]) -> list[R]:
    """Keep the last record per identity, at the slot of its first occurrence."""
    unique: dict[str, R] = {}
    for record in records:
        unique[record.id] = record
    return list(unique.values())


def merge(
    baseline: Sequence[R],
    staged: Sequence[R],
    recency: Callable[[R], object] | None = None,
) -> list[R]:
    """Return the canonical collection, newest first.

    Staged records are appended after the baseline so they win on identity.
    Records without a parseable recency value sort last.
    """
    field = recency or (lambda record: record.recency)
    unique = dedupe([*baseline, *staged])
    return sorted(unique, key=lambda record: recency_key(field(record)), reverse=True)
