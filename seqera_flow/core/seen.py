from __future__ import annotations

from typing import Iterable


class SeenSet:
    """Tracks identities observed by the last successful poll.

    The snapshot starts out absent rather than empty: until the first
    :meth:`commit` nothing is reported as new, so the first poll only
    establishes a baseline.
    """

    def __init__(self) -> None:
        self._snapshot: frozenset[str] | None = None

    @property
    def has_baseline(self) -> bool:
        return self._snapshot is not None

    def diff(self, current_ids: Iterable[str]) -> list[str]:
        if self._snapshot is None:
            return []

        fresh: list[str] = []
        emitted: set[str] = set()
        for identity in current_ids:
            if identity in self._snapshot or identity in emitted:
                continue
            emitted.add(identity)
            fresh.append(identity)
        return fresh

    def commit(self, current_ids: Iterable[str]) -> None:
        self._snapshot = frozenset(current_ids)

    def reset(self) -> None:
        self._snapshot = None
