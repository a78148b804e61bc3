"""Studios: interactive analysis sessions (notebooks, IDEs) run on a compute environment."""
from __future__ import annotations

import logging
from typing import Any

from seqera_flow.application.base import Adapter
from seqera_flow.application.datalinks import resolve_data_link
from seqera_flow.application.monitoring import PollSession, WorkflowTracker
from seqera_flow.core.launch import split_profiles
from seqera_flow.core.schema import StudioCreateSettings, StudiosMonitorSettings
from seqera_flow.core.settings import PlatformConfig
from seqera_flow.core.status import Classification, classify_studio
from seqera_flow.domain import ConfigurationError, InputEvent, SeqeraError
from seqera_flow.infrastructure.host import Host
from seqera_flow.infrastructure.platform import ClientFactory

logger = logging.getLogger(__name__)


class StudiosMonitor(WorkflowTracker):
    """Follow a studio session until it stops or fails.

    Starting, building, stopping and running sessions go to channel 0, a
    stopped session to channel 1 and anything else to channel 2.
    """

    kind = "studio"
    id_key = "studioId"

    def __init__(
        self,
        host: Host,
        settings: StudiosMonitorSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or StudiosMonitorSettings(), shared=shared, client_factory=client_factory)

    async def observe(self, session: PollSession) -> tuple[str, str, dict[str, Any]]:
        result = await session.client.fetch_studio(session.entity_id, session.workspace_id)
        return result.studio_id, result.status, result.raw

    def categorize(self, raw_status: str | None) -> Classification:
        return classify_studio(raw_status)

    async def handle_input(self, event: InputEvent) -> None:
        settings: StudiosMonitorSettings = self.settings  # type: ignore[assignment]
        if not event.studio_id:
            self.show_error()
            raise ConfigurationError("studioId not provided", stage="monitor")

        await self.follow(
            event,
            event.studio_id,
            poll_interval=settings.poll_interval,
            keep_polling=settings.keep_polling,
        )


class StudioCreate(Adapter):
    """Create a studio, mounting the named Data Links."""

    def __init__(
        self,
        host: Host,
        settings: StudioCreateSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or StudioCreateSettings(), shared=shared, client_factory=client_factory)
        host.on_input(self.handle_input)

    def build_body(self, name: str, description: str | None, mount_ids: list[str]) -> dict[str, Any]:
        settings: StudioCreateSettings = self.settings  # type: ignore[assignment]
        configuration: dict[str, Any] = {
            "gpu": settings.gpu,
            "cpu": settings.cpu,
            "memory": settings.memory,
            "mountData": mount_ids,
        }
        if settings.conda_environment:
            configuration["condaEnvironment"] = settings.conda_environment
        if settings.lifespan_hours is not None:
            configuration["lifespanHours"] = settings.lifespan_hours

        body: dict[str, Any] = {
            "name": name,
            "dataStudioToolUrl": settings.container_uri,
            "computeEnvId": settings.compute_env_id,
            "configuration": configuration,
            "isPrivate": settings.is_private,
            "spot": settings.spot,
        }
        if description:
            body["description"] = description
        if settings.initial_checkpoint_id is not None:
            body["initialCheckpointId"] = settings.initial_checkpoint_id
        return body

    async def handle_input(self, event: InputEvent) -> None:
        settings: StudioCreateSettings = self.settings  # type: ignore[assignment]
        name = (event.studio_name or settings.studio_name or "").strip()
        if not name:
            self.show_error()
            raise ConfigurationError("studioName not provided", stage="studio")
        if not settings.container_uri:
            self.show_error()
            raise ConfigurationError("containerUri (dataStudioToolUrl) not provided", stage="studio")
        if not settings.compute_env_id:
            self.show_error()
            raise ConfigurationError("computeEnvId not provided", stage="studio")

        self.show("blue", "ring", "creating")
        connection = self.connection_for(event.overrides())
        client = self.client_for(connection)
        mounts = split_profiles(event.mount_data if event.mount_data is not None else settings.mount_data)
        try:
            mount_ids = []
            for mount in mounts:
                link = await resolve_data_link(client, mount, connection.workspace_id)
                mount_ids.append(link["id"])

            body = self.build_body(name, event.description or settings.description, mount_ids)
            try:
                studio_id, data = await client.create_studio(
                    body,
                    connection.workspace_id,
                    auto_start=settings.auto_start,
                )
            except SeqeraError as exc:
                exc.stage = exc.stage or "studio"
                raise
        except SeqeraError as exc:
            self.show_error()
            self.host.report_error(f"Seqera Studios create failed: {exc}", event.passthrough())
            raise
        finally:
            await client.aclose()

        logger.info("Created studio %s (%s)", name, studio_id)
        self.show("green", "dot", "created")
        self.host.emit(0, {**event.passthrough(), "payload": data, "studioId": studio_id})


__all__ = ["StudioCreate", "StudiosMonitor"]
