from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from seqera_flow.core.durations import interval_seconds, parse_duration
from seqera_flow.core.settings import ConnectionOverrides


class AdapterSettings(BaseModel):
    """Fields every adapter accepts; the per-message input may override them."""

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    base_url: str | None = None
    workspace_id: str | None = None
    # Deprecated per-adapter credential, used only when nothing else supplies one.
    legacy_token: str | None = None

    def overrides(self) -> ConnectionOverrides:
        return ConnectionOverrides(base_url=self.base_url, workspace_id=self.workspace_id)


class NamedParam(BaseModel):
    name: str
    value: Any = None


class LaunchMonitorSettings(AdapterSettings):
    poll_interval: float = Field(default=5, gt=0)
    launchpad_name: str | None = None
    source_workspace_id: str | None = None

    def overrides(self) -> ConnectionOverrides:
        return ConnectionOverrides(
            base_url=self.base_url,
            workspace_id=self.workspace_id,
            source_workspace_id=self.source_workspace_id,
        )


class WorkflowMonitorSettings(AdapterSettings):
    poll_interval: float = Field(default=5, gt=0)
    keep_polling: bool = True


class WorkflowStatusSettings(AdapterSettings):
    pass


class WorkflowLaunchSettings(AdapterSettings):
    launchpad_name: str | None = None
    source_workspace_id: str | None = None
    run_name: str | None = None
    config_profiles: str | list[str] | None = None
    resume_workflow_id: str | None = None
    params: list[NamedParam] = Field(default_factory=list)

    def overrides(self) -> ConnectionOverrides:
        return ConnectionOverrides(
            base_url=self.base_url,
            workspace_id=self.workspace_id,
            source_workspace_id=self.source_workspace_id,
        )


class WorkflowPollSettings(AdapterSettings):
    search: str | None = None
    max_results: int = Field(default=50, gt=0)
    poll_frequency: float = Field(default=1, gt=0)
    poll_units: Literal["seconds", "minutes", "hours", "days"] = "minutes"

    @property
    def interval_seconds(self) -> float:
        return interval_seconds(self.poll_frequency, self.poll_units)


class DataLinkSettings(AdapterSettings):
    data_link_name: str | None = None
    base_path: str = ""
    prefix: str | None = None
    pattern: str | None = None
    max_results: int = Field(default=100, gt=0)
    depth: int = Field(default=0, ge=0)
    return_type: Literal["files", "folders", "all"] = "files"


class DataLinkPollSettings(DataLinkSettings):
    poll_frequency: str | float = "15:00"

    @property
    def interval_seconds(self) -> float:
        seconds = parse_duration(self.poll_frequency)
        if not seconds:
            return 15 * 60
        return seconds


class DataLinkAddSettings(AdapterSettings):
    data_link_name: str | None = None
    description: str | None = None
    resource_ref: str | None = None
    provider: str | None = "aws"
    credentials_name: str | None = None
    resource_type: str = "bucket"
    public_accessible: bool = False


class StudiosMonitorSettings(AdapterSettings):
    poll_interval: float = Field(default=5, gt=0)
    keep_polling: bool = True


class StudioCreateSettings(AdapterSettings):
    studio_name: str | None = None
    description: str | None = None
    container_uri: str | None = None
    compute_env_id: str | None = None
    mount_data: str | list[str] = Field(default_factory=list)
    cpu: int = Field(default=2, gt=0)
    memory: int = Field(default=8192, gt=0)
    gpu: int = Field(default=0, ge=0)
    initial_checkpoint_id: int | None = None
    conda_environment: str | None = None
    lifespan_hours: int | None = None
    is_private: bool = False
    spot: bool = False
    auto_start: bool | None = True


class DatasetCreateSettings(AdapterSettings):
    dataset_name: str | None = None
    description: str | None = None
    file_type: Literal["csv", "tsv"] = "csv"
    has_header: bool = False

    @property
    def mime_type(self) -> str:
        return "text/tab-separated-values" if self.file_type == "tsv" else "text/csv"
