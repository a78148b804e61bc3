"""Workflow status classification."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StatusCategory(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self in (StatusCategory.PENDING, StatusCategory.RUNNING)

    @property
    def is_terminal(self) -> bool:
        return not self.is_active


PENDING_STATUSES = frozenset({"submitted", "pending"})
RUNNING_STATUSES = frozenset({"running"})
SUCCESS_STATUSES = frozenset({"completed", "succeeded", "success"})
ERROR_STATUSES = frozenset({"failed", "error"})

STUDIO_PENDING_STATUSES = frozenset({"starting", "building", "stopping"})
STUDIO_RUNNING_STATUSES = frozenset({"running"})
STUDIO_STOPPED_STATUSES = frozenset({"stopped"})
STUDIO_ERROR_STATUSES = frozenset({"errored", "buildfailed"})


@dataclass(slots=True, frozen=True)
class Classification:
    """Result of :func:`classify`; ``color`` is a presentation hint only."""

    status: str
    category: StatusCategory
    color: str

    @property
    def shape(self) -> str:
        return "ring" if self.category.is_active else "dot"


def classify(raw_status: str | None) -> Classification:
    """Map a raw platform status onto a :class:`StatusCategory`.

    Matching is case-insensitive and total: anything outside the known
    vocabularies is a failure so an unknown status can never keep a monitor
    polling forever.
    """

    status = (raw_status or "").strip().lower()
    if status in PENDING_STATUSES:
        return Classification(status, StatusCategory.PENDING, "yellow")
    if status in RUNNING_STATUSES:
        return Classification(status, StatusCategory.RUNNING, "blue")
    if status in SUCCESS_STATUSES:
        return Classification(status, StatusCategory.SUCCEEDED, "green")
    color = "red" if status in ERROR_STATUSES else "grey"
    return Classification(status, StatusCategory.FAILED, color)


def classify_studio(raw_status: str | None) -> Classification:
    """Studio sessions: a stopped studio has finished cleanly, anything unknown failed."""

    status = (raw_status or "").strip().lower()
    if status in STUDIO_PENDING_STATUSES:
        return Classification(status, StatusCategory.PENDING, "yellow")
    if status in STUDIO_RUNNING_STATUSES:
        return Classification(status, StatusCategory.RUNNING, "blue")
    if status in STUDIO_STOPPED_STATUSES:
        return Classification(status, StatusCategory.SUCCEEDED, "green")
    color = "red" if status in STUDIO_ERROR_STATUSES else "grey"
    return Classification(status, StatusCategory.FAILED, color)


__all__ = ["Classification", "StatusCategory", "classify", "classify_studio"]
