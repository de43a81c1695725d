"""Merging submitted entries into a slot record."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

DIGITS = 10

CountVector = tuple[int, ...]


@dataclass(frozen=True)
class TokenEntry:
    """A quantity of one digit, keyed within its slot by ``timestamp``."""

    number: int
    quantity: int
    timestamp: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TokenEntry:
        return cls(
            number=int(data["number"]),
            quantity=int(data["quantity"]),
            timestamp=int(data["timestamp"]),
        )

    def as_dict(self) -> dict[str, int]:
        return {"number": self.number, "quantity": self.quantity, "timestamp": self.timestamp}


class HasEntries(Protocol):
    entries: Any


@dataclass(frozen=True)
class MergeResult:
    """Entries to persist for a slot and the counts derived from them."""

    entries: tuple[TokenEntry, ...]
    counts: CountVector
    added: int

    def entry_dicts(self) -> list[dict[str, int]]:
        return [entry.as_dict() for entry in self.entries]


def zero_counts() -> CountVector:
    return (0,) * DIGITS


def fold_counts(entries: Iterable[TokenEntry]) -> CountVector:
    """Sum quantities per digit.

    Digits are validated when requests are parsed, so every entry here is 0-9.
    """
    counts = [0] * DIGITS
    for entry in entries:
        counts[entry.number] += entry.quantity
    return tuple(counts)


def _coerce(entry: TokenEntry | Mapping[str, Any]) -> TokenEntry:
    return entry if isinstance(entry, TokenEntry) else TokenEntry.from_mapping(entry)


def merge(
    existing: HasEntries | Mapping[str, Any] | None,
    incoming: Sequence[TokenEntry | Mapping[str, Any]],
) -> MergeResult:
    """Combine ``incoming`` entries with an existing record's entries.

    Existing entries keep their order; incoming entries are appended in
    order unless an entry with the same ``timestamp`` is already present.
    Only the timestamp is compared. Counts are recomputed from the merged
    list, and neither argument is modified. With no existing record the
    incoming batch is taken as is.
    """
    if existing is None:
        new_entries = [_coerce(entry) for entry in incoming]
        return MergeResult(tuple(new_entries), fold_counts(new_entries), len(new_entries))

    if isinstance(existing, Mapping):
        current = existing.get("entries")
    else:
        current = existing.entries
    merged = [_coerce(entry) for entry in current or ()]
    seen = {entry.timestamp for entry in merged}
    added = 0
    for entry in map(_coerce, incoming):
        if entry.timestamp in seen:
            continue
        merged.append(entry)
        seen.add(entry.timestamp)
        added += 1
    return MergeResult(tuple(merged), fold_counts(merged), added)
