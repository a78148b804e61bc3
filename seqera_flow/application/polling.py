"""Periodic list adapters that announce entities appearing between polls.

Channel 0 receives the full listing on every successful poll; channel 1
receives what is new compared with the previous successful poll. The first
poll only records a baseline. A failed poll is reported and leaves the
baseline untouched.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from seqera_flow.application.base import Adapter
from seqera_flow.application.datalinks import list_for_settings
from seqera_flow.core.schema import AdapterSettings, DataLinkPollSettings, WorkflowPollSettings
from seqera_flow.core.seen import SeenSet
from seqera_flow.core.settings import Connection, PlatformConfig
from seqera_flow.domain import ConfigurationError
from seqera_flow.infrastructure.host import Host
from seqera_flow.infrastructure.platform import ClientFactory, SeqeraClient
from seqera_flow.infrastructure.scheduler import PollScheduler

logger = logging.getLogger(__name__)

ALL = 0
NEW = 1


class ListPoller(Adapter, ABC):
    """Shared polling loop for the list adapters.

    Nothing is polled on construction. The hosting runtime calls :meth:`start`
    once its event loop is running (at deploy time) and the poll loop stops
    when the host closes the adapter.
    """

    kind = "list"

    def __init__(
        self,
        host: Host,
        settings: AdapterSettings,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings, shared=shared, client_factory=client_factory)
        self.seen = SeenSet()
        self.scheduler = PollScheduler(name=f"{self.kind}-poll", on_error=self._poll_failed)
        host.on_close(self.close)

    @property
    @abstractmethod
    def interval_seconds(self) -> float:
        ...

    def start(self) -> None:
        """Poll now and then every :attr:`interval_seconds`; needs a running loop."""

        self.scheduler.start(self.interval_seconds, self.poll)

    async def close(self) -> None:
        self.scheduler.stop()
        await self.scheduler.join()

    def next_poll(self) -> str:
        moment = datetime.now(timezone.utc) + timedelta(seconds=self.interval_seconds)
        return moment.isoformat().replace("+00:00", "Z")

    async def poll(self) -> None:
        self.show("blue", "ring", "polling")
        connection = self.connection_for()
        client = self.client_for(connection)
        try:
            await self.poll_with(client, connection)
        finally:
            await client.aclose()

    @abstractmethod
    async def poll_with(self, client: SeqeraClient, connection: Connection) -> None:
        ...

    def _poll_failed(self, exc: Exception) -> None:
        self.show_error()
        self.host.report_error(f"Seqera {self.kind} poll failed: {exc}")


class WorkflowPoller(ListPoller):
    """List workflows of a workspace and announce newly started ones."""

    kind = "workflow"

    def __init__(
        self,
        host: Host,
        settings: WorkflowPollSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or WorkflowPollSettings(), shared=shared, client_factory=client_factory)

    @property
    def interval_seconds(self) -> float:
        return self.settings.interval_seconds  # type: ignore[attr-defined]

    async def poll_with(self, client: SeqeraClient, connection: Connection) -> None:
        settings: WorkflowPollSettings = self.settings  # type: ignore[assignment]
        if not connection.workspace_id:
            raise ConfigurationError("Workspace ID not provided", stage="poll")

        workflows = await client.list_workflows(
            connection.workspace_id,
            max_results=settings.max_results,
            search=settings.search,
        )
        identities = [workflow.workflow_id for workflow in workflows]
        fresh = self.seen.diff(identities)
        self.seen.commit(identities)

        self.show("green", "dot", f"{len(workflows)} workflows")
        self.host.emit(
            ALL,
            {
                "payload": {"workflows": [workflow.raw for workflow in workflows], "nextPoll": self.next_poll()},
                "workflowIds": identities,
            },
        )

        by_id = {}
        for workflow in workflows:
            by_id.setdefault(workflow.workflow_id, workflow)
        for workflow_id in fresh:
            logger.info("New workflow detected: %s", workflow_id)
            self.host.emit(NEW, {"payload": {"workflow": by_id[workflow_id].raw}, "workflowId": workflow_id})


class DataLinkPoller(ListPoller):
    """List a Data Link periodically and announce newly appeared objects."""

    kind = "datalink"

    def __init__(
        self,
        host: Host,
        settings: DataLinkPollSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or DataLinkPollSettings(), shared=shared, client_factory=client_factory)

    @property
    def interval_seconds(self) -> float:
        return self.settings.interval_seconds  # type: ignore[attr-defined]

    async def poll_with(self, client: SeqeraClient, connection: Connection) -> None:
        listing = await list_for_settings(client, self.settings, connection.workspace_id)  # type: ignore[arg-type]
        names = listing.names
        fresh = set(self.seen.diff(names))
        self.seen.commit(names)

        self.show("green", "dot", f"{len(listing.items)} items")
        self.host.emit(
            ALL,
            {"payload": {**listing.payload(), "nextPoll": self.next_poll()}, "files": listing.paths()},
        )

        if fresh:
            new_items = [item for item in listing.items if str(item.get("name")) in fresh]
            logger.info("%d new objects in Data Link %s", len(new_items), listing.resource_ref)
            self.host.emit(NEW, {"payload": listing.payload(new_items), "files": listing.paths(new_items)})


__all__ = ["ALL", "NEW", "DataLinkPoller", "ListPoller", "WorkflowPoller"]
