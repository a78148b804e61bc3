"""Domain entities for workflow submission and monitoring."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from seqera_flow.core.settings import ConnectionOverrides


class MonitorState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class InputEvent:
    """A message delivered by the host to an adapter.

    ``context`` carries the message properties that pass through untouched
    (``topic``, ``_msgid``...); every other field is an optional override.
    """

    payload: Any = None
    body: dict[str, Any] | None = None
    workflow_id: str | None = None
    studio_id: str | None = None
    workspace_id: str | None = None
    source_workspace_id: str | None = None
    base_url: str | None = None
    token: str | None = None
    launchpad_name: str | None = None
    params: dict[str, Any] | None = None
    run_name: str | None = None
    config_profiles: str | list[str] | None = None
    resume_workflow_id: str | None = None
    poll_interval: Any = None
    dataset_name: str | None = None
    data_link_name: str | None = None
    studio_name: str | None = None
    mount_data: str | list[str] | None = None
    resource_ref: str | None = None
    provider: str | None = None
    credentials_name: str | None = None
    file_contents: Any = None
    description: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def overrides(self) -> ConnectionOverrides:
        return ConnectionOverrides(
            base_url=self.base_url,
            workspace_id=self.workspace_id,
            source_workspace_id=self.source_workspace_id,
            token=self.token,
        )

    def passthrough(self) -> dict[str, Any]:
        return dict(self.context)


@dataclass(slots=True)
class Submission:
    workflow_id: str | None
    raw: dict[str, Any]


@dataclass(slots=True)
class WorkflowStatus:
    workflow_id: str
    status: str
    raw: dict[str, Any]


@dataclass(slots=True)
class StudioStatus:
    studio_id: str
    status: str
    raw: dict[str, Any]


@dataclass(slots=True)
class WorkflowSummary:
    workflow_id: str
    status: str | None
    raw: dict[str, Any]


@dataclass(slots=True)
class DataLinkListing:
    items: list[dict[str, Any]] = field(default_factory=list)
    resource_ref: str | None = None
    resource_type: str | None = None
    provider: str | None = None

    @property
    def names(self) -> list[str]:
        return [str(item.get("name")) for item in self.items]

    def paths(self, items: list[dict[str, Any]] | None = None) -> list[str]:
        selected = self.items if items is None else items
        return [f"{self.resource_ref}/{item.get('name')}" for item in selected]

    def payload(self, items: list[dict[str, Any]] | None = None) -> dict[str, Any]:
        return {
            "files": self.items if items is None else items,
            "resourceType": self.resource_type,
            "resourceRef": self.resource_ref,
            "provider": self.provider,
        }
