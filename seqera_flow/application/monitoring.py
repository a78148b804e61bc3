"""Adapters that follow a single workflow until it reaches a terminal status.

The adapters route every status update to one of three channels: in
progress (submitted, pending, running), succeeded and failed (anything else,
including statuses the classifier does not recognise). An instance tracks one
workflow at a time; new input replaces the live session.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from seqera_flow.application.base import Adapter
from seqera_flow.application.launch import resolve_launch_body
from seqera_flow.core.durations import coerce_seconds
from seqera_flow.core.schema import AdapterSettings, LaunchMonitorSettings, WorkflowMonitorSettings
from seqera_flow.core.settings import Connection, PlatformConfig
from seqera_flow.core.status import Classification, StatusCategory, classify
from seqera_flow.domain import ConfigurationError, InputEvent, MonitorState, SeqeraError
from seqera_flow.infrastructure.host import Host
from seqera_flow.infrastructure.platform import ClientFactory, SeqeraClient
from seqera_flow.infrastructure.scheduler import PollScheduler

logger = logging.getLogger(__name__)

IN_PROGRESS = 0
SUCCEEDED = 1
FAILED = 2


@dataclass(slots=True, eq=False)
class PollSession:
    """Live monitoring state for one workflow or studio; owns its repeating task."""

    entity_id: str
    workspace_id: str | None
    interval: float
    client: SeqeraClient
    scheduler: PollScheduler
    context: dict[str, Any] = field(default_factory=dict)
    last: Classification | None = None


class WorkflowTracker(Adapter, ABC):
    """Shared session handling for the monitoring adapters.

    Subclasses decide how input starts a session; :meth:`observe` and
    :meth:`categorize` decide what is fetched and how its status is routed.
    """

    kind = "workflow"
    id_key = "workflowId"

    def __init__(
        self,
        host: Host,
        settings: AdapterSettings,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings, shared=shared, client_factory=client_factory)
        self._session: PollSession | None = None
        self.state = MonitorState.IDLE
        host.on_input(self.handle_input)
        host.on_close(self.close)

    @property
    def session(self) -> PollSession | None:
        return self._session

    @abstractmethod
    async def handle_input(self, event: InputEvent) -> None:
        """React to one delivered message."""

    async def observe(self, session: PollSession) -> tuple[str, str, dict[str, Any]]:
        result = await session.client.fetch_status(session.entity_id, session.workspace_id)
        return result.workflow_id, result.status, result.raw

    def categorize(self, raw_status: str | None) -> Classification:
        return classify(raw_status)

    # ------------------------------------------------------------------
    # sessions
    # ------------------------------------------------------------------
    async def open_session(
        self,
        entity_id: str,
        connection: Connection,
        client: SeqeraClient,
        *,
        interval: float,
        context: dict[str, Any],
    ) -> PollSession:
        """Install a new session, retiring whichever one was live."""

        scheduler = PollScheduler(name=f"{self.kind}-{entity_id}")
        session = PollSession(
            entity_id=entity_id,
            workspace_id=connection.workspace_id,
            interval=interval,
            client=client,
            scheduler=scheduler,
            context=context,
        )
        scheduler.on_error = partial(self._tick_failed, session)
        previous, self._session = self._session, session
        if previous is not None:
            await self._retire(previous)
        return session

    def start_polling(self, session: PollSession) -> None:
        if session is not self._session:
            return
        self.state = MonitorState.POLLING
        session.scheduler.start(session.interval, partial(self.poll_once, session))

    async def poll_once(self, session: PollSession) -> Classification | None:
        """Fetch and route the current status of ``session``'s target."""

        entity_id, raw_status, raw = await self.observe(session)
        if session is not self._session:
            session.scheduler.stop()
            return None

        classification = self.categorize(raw_status)
        session.last = classification
        message = {
            **session.context,
            "payload": raw,
            self.id_key: entity_id or session.entity_id,
        }
        self.show(classification.color, classification.shape, classification.status)

        if classification.category.is_active:
            self.host.emit(IN_PROGRESS, message)
            return classification

        succeeded = classification.category is StatusCategory.SUCCEEDED
        self.state = MonitorState.SUCCEEDED if succeeded else MonitorState.FAILED
        self.detach(session)
        logger.info("%s %s finished with status %r", self.kind.capitalize(), session.entity_id, classification.status)
        self.host.emit(SUCCEEDED if succeeded else FAILED, message)
        await session.client.aclose()
        return classification

    async def follow(self, event: InputEvent, entity_id: str, *, poll_interval: float, keep_polling: bool) -> None:
        """Start tracking ``entity_id``; without ``keep_polling`` check it once."""

        await self.close()
        connection = self.connection_for(event.overrides())
        client = self.client_for(connection)
        session = await self.open_session(
            entity_id,
            connection,
            client,
            interval=coerce_seconds(event.poll_interval, poll_interval),
            context=event.passthrough(),
        )

        if keep_polling:
            self.start_polling(session)
            return

        try:
            await self.poll_once(session)
        except SeqeraError:
            self.show_error()
            raise
        finally:
            if self._session is session:
                await self.end_session(session)
                self.state = MonitorState.IDLE

    def _tick_failed(self, session: PollSession, exc: Exception) -> None:
        if session is not self._session:
            return
        self.show_error()
        self.host.report_error(
            f"{self.kind.capitalize()} {session.entity_id}: {exc}",
            {**session.context, self.id_key: session.entity_id},
        )

    def detach(self, session: PollSession) -> None:
        session.scheduler.stop()
        if self._session is session:
            self._session = None

    async def end_session(self, session: PollSession) -> None:
        self.detach(session)
        await session.client.aclose()

    async def _retire(self, session: PollSession) -> None:
        session.scheduler.stop()
        await session.scheduler.join()
        await session.client.aclose()

    async def close(self) -> None:
        """Tear down the live session; safe to call repeatedly."""

        session, self._session = self._session, None
        self.state = MonitorState.IDLE
        if session is not None:
            await self._retire(session)


class LaunchMonitor(WorkflowTracker):
    """Submit a launch and follow the resulting workflow to completion."""

    def __init__(
        self,
        host: Host,
        settings: LaunchMonitorSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or LaunchMonitorSettings(), shared=shared, client_factory=client_factory)

    async def handle_input(self, event: InputEvent) -> None:
        await self.close()
        settings: LaunchMonitorSettings = self.settings  # type: ignore[assignment]

        self.state = MonitorState.SUBMITTING
        self.show("blue", "ring", "launching")

        connection = self.connection_for(event.overrides())
        client = self.client_for(connection)
        context = event.passthrough()
        try:
            body = await resolve_launch_body(
                client,
                body=event.body if event.body is not None else event.payload,
                launchpad_name=event.launchpad_name or settings.launchpad_name,
                workspace_id=connection.workspace_id,
                params=event.params,
            )
            try:
                submission = await client.submit_launch(body, connection.workspace_id, connection.source_workspace_id)
            except SeqeraError as exc:
                exc.stage = exc.stage or "launch"
                raise
            if not submission.workflow_id:
                raise ConfigurationError("workflowId not returned by launch request", stage="launch")
        except SeqeraError as exc:
            await client.aclose()
            self.state = MonitorState.FAILED
            self.show_error()
            self.host.emit(
                FAILED,
                {**context, "payload": event.payload, "error": exc.detail(), "errorStage": exc.stage},
            )
            raise

        logger.info("Launched workflow %s in workspace %s", submission.workflow_id, connection.workspace_id)
        self.show("yellow", "ring", "submitted")

        interval = coerce_seconds(event.poll_interval, settings.poll_interval)
        session = await self.open_session(
            submission.workflow_id,
            connection,
            client,
            interval=interval,
            context=context,
        )
        self.start_polling(session)


class WorkflowMonitor(WorkflowTracker):
    """Follow an already running workflow identified by the input message."""

    def __init__(
        self,
        host: Host,
        settings: WorkflowMonitorSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or WorkflowMonitorSettings(), shared=shared, client_factory=client_factory)

    async def handle_input(self, event: InputEvent) -> None:
        settings: WorkflowMonitorSettings = self.settings  # type: ignore[assignment]
        if not event.workflow_id:
            self.show_error()
            raise ConfigurationError("workflowId not provided", stage="monitor")

        await self.follow(
            event,
            event.workflow_id,
            poll_interval=settings.poll_interval,
            keep_polling=settings.keep_polling,
        )


__all__ = [
    "FAILED",
    "IN_PROGRESS",
    "SUCCEEDED",
    "LaunchMonitor",
    "PollSession",
    "WorkflowMonitor",
    "WorkflowTracker",
]
