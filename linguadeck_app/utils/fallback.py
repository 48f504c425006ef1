"""Ordered, short-circuiting fallback chains.

A chain is a sequence of named candidates evaluated top-down; the first
candidate that yields an accepted value wins and the rest are never
evaluated, so expensive lookups (filesystem scans, parsing) only run when
every earlier candidate failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional


@dataclass(frozen=True)
class Candidate:
    """A named candidate, so a chain's precedence can be logged and tested."""

    label: str
    produce: Callable[[], Any]

    def __call__(self):
        return self.produce()


def first_labelled_match(
    candidates: Iterable[Candidate],
    accept: Optional[Callable[[Any], bool]] = None,
) -> tuple[Optional[str], Optional[Any]]:
    """Return ``(label, value)`` of the first candidate whose value is accepted.

    ``None`` and empty strings are always skipped. Without ``accept`` any other
    value is taken. ``(None, None)`` when the chain is exhausted.
    """
    for candidate in candidates:
        value = candidate()
        if value is None or value == '':
            continue
        if accept is None or accept(value):
            return candidate.label, value
    return None, None
