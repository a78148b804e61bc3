"""Browsing Data Links (cloud buckets registered in a workspace)."""
from __future__ import annotations

import logging
import re
from typing import Any

from seqera_flow.application.base import Adapter
from seqera_flow.core.schema import DataLinkAddSettings, DataLinkSettings
from seqera_flow.core.settings import PlatformConfig
from seqera_flow.domain import ConfigurationError, DataLinkListing, InputEvent, ResolutionError, SeqeraError
from seqera_flow.infrastructure.host import Host
from seqera_flow.infrastructure.platform import ClientFactory, SeqeraClient

logger = logging.getLogger(__name__)


def _is_type(item: dict[str, Any], kind: str) -> bool:
    return str(item.get("type") or "").upper() == kind


async def resolve_data_link(client: SeqeraClient, name: str, workspace_id: str | None) -> dict[str, Any]:
    """Find the single Data Link called ``name``."""

    links = await client.search_data_links(name, workspace_id)
    if not links:
        raise ResolutionError(f"Could not find Data Link '{name}'", stage="datalink")
    if len(links) != 1:
        raise ResolutionError(f"Found more than one Data Link matching '{name}'", stage="datalink")
    return links[0]


async def list_data_link(
    client: SeqeraClient,
    name: str | None,
    workspace_id: str | None,
    *,
    base_path: str = "",
    prefix: str | None = None,
    pattern: str | None = None,
    max_results: int = 100,
    depth: int = 0,
    return_type: str = "files",
) -> DataLinkListing:
    """List objects under ``base_path`` of the Data Link called ``name``.

    Folders are descended into up to ``depth`` levels and pagination is
    followed until ``max_results`` objects have been collected. ``pattern`` is
    a regular expression applied to the object names afterwards.
    """

    if not name:
        raise ConfigurationError("dataLinkName not provided", stage="datalink")

    link = await resolve_data_link(client, name, workspace_id)
    credentials = link.get("credentials") or []
    credentials_id = credentials[0].get("id") if credentials else None
    items: list[dict[str, Any]] = []

    async def browse(path: str, level: int) -> None:
        if len(items) >= max_results:
            return

        next_page: str | None = None
        while True:
            page = await client.browse_data_link(
                link["id"],
                path,
                workspace_id,
                search=prefix or None,
                credentials_id=credentials_id,
                next_page=next_page,
            )
            objects = page.get("objects")
            objects = objects if isinstance(objects, list) else []

            parent = f"{path}/" if path else ""
            remaining = max_results - len(items)
            items.extend({**obj, "name": f"{parent}{obj.get('name')}"} for obj in objects[:remaining])

            if level < depth and len(items) < max_results:
                for folder in objects:
                    if len(items) >= max_results:
                        break
                    if not _is_type(folder, "FOLDER"):
                        continue
                    clean = str(folder.get("name") or "").rstrip("/")
                    await browse(f"{path}/{clean}" if path else clean, level + 1)

            next_page = page.get("nextPageToken") or page.get("nextPage")
            if not next_page or len(items) >= max_results:
                break

    await browse(base_path or "", 0)

    selected = items
    if pattern:
        try:
            regex = re.compile(pattern)
        except re.error:
            logger.warning("Invalid regex pattern: %s", pattern)
        else:
            selected = [item for item in selected if regex.search(str(item.get("name")))]

    if return_type == "files":
        selected = [item for item in selected if _is_type(item, "FILE")]
    elif return_type == "folders":
        selected = [item for item in selected if _is_type(item, "FOLDER")]

    return DataLinkListing(
        items=selected,
        resource_ref=link.get("resourceRef"),
        resource_type=link.get("type"),
        provider=link.get("provider"),
    )


async def list_for_settings(
    client: SeqeraClient,
    settings: DataLinkSettings,
    workspace_id: str | None,
    *,
    name: str | None = None,
) -> DataLinkListing:
    return await list_data_link(
        client,
        name or settings.data_link_name,
        workspace_id,
        base_path=settings.base_path,
        prefix=settings.prefix,
        pattern=settings.pattern,
        max_results=settings.max_results,
        depth=settings.depth,
        return_type=settings.return_type,
    )


class DataLinkList(Adapter):
    """List a Data Link each time a message arrives."""

    def __init__(
        self,
        host: Host,
        settings: DataLinkSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or DataLinkSettings(), shared=shared, client_factory=client_factory)
        host.on_input(self.handle_input)

    async def handle_input(self, event: InputEvent) -> None:
        self.show("blue", "ring", "listing")
        connection = self.connection_for(event.overrides())
        client = self.client_for(connection)
        try:
            listing = await list_for_settings(
                client,
                self.settings,  # type: ignore[arg-type]
                connection.workspace_id,
                name=event.data_link_name,
            )
        except SeqeraError as exc:
            self.show_error()
            self.host.report_error(f"Seqera datalink list failed: {exc}", event.passthrough())
            raise
        finally:
            await client.aclose()

        self.show("green", "dot", f"{len(listing.items)} items")
        self.host.emit(0, {**event.passthrough(), "payload": listing.payload(), "files": listing.paths()})


async def resolve_credentials(client: SeqeraClient, name: str, workspace_id: str | None) -> str:
    """Return the id of the workspace credentials called ``name``."""

    credentials = await client.list_credentials(workspace_id)
    matches = [entry for entry in credentials if entry.get("name") == name]
    if not matches:
        raise ResolutionError(f"Could not find credentials '{name}'", stage="credentials")
    if len(matches) != 1:
        raise ResolutionError(f"Found more than one set of credentials named '{name}'", stage="credentials")
    return matches[0]["id"]


class DataLinkAdd(Adapter):
    """Register a cloud bucket as a Data Link in the workspace."""

    def __init__(
        self,
        host: Host,
        settings: DataLinkAddSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or DataLinkAddSettings(), shared=shared, client_factory=client_factory)
        host.on_input(self.handle_input)

    async def handle_input(self, event: InputEvent) -> None:
        settings: DataLinkAddSettings = self.settings  # type: ignore[assignment]
        name = event.data_link_name or settings.data_link_name
        resource_ref = event.resource_ref or settings.resource_ref
        provider = event.provider or settings.provider
        for value, label in ((name, "dataLinkName"), (resource_ref, "resourceRef"), (provider, "provider")):
            if not value:
                self.show_error()
                raise ConfigurationError(f"{label} not provided", stage="datalink")

        connection = self.connection_for(event.overrides())
        client = self.client_for(connection)
        try:
            self.show("blue", "ring", "creating")
            body = {
                "name": name,
                "resourceRef": resource_ref,
                "provider": provider,
                "type": settings.resource_type,
                "publicAccessible": settings.public_accessible,
            }
            description = event.description or settings.description
            if description:
                body["description"] = description

            credentials_name = (event.credentials_name or settings.credentials_name or "").strip()
            if credentials_name:
                self.show("yellow", "ring", "resolving credentials")
                body["credentialsId"] = await resolve_credentials(client, credentials_name, connection.workspace_id)

            try:
                data_link_id, data = await client.create_data_link(body, connection.workspace_id)
            except SeqeraError as exc:
                exc.stage = exc.stage or "datalink"
                raise
        except SeqeraError as exc:
            self.show_error()
            self.host.report_error(f"Seqera data-link create failed: {exc}", event.passthrough())
            raise
        finally:
            await client.aclose()

        logger.info("Created Data Link %s (%s)", name, data_link_id)
        self.show("green", "dot", "created")
        self.host.emit(
            0,
            {**event.passthrough(), "payload": data, "dataLinkId": data_link_id, "dataLinkName": name},
        )


__all__ = [
    "DataLinkAdd",
    "DataLinkList",
    "list_data_link",
    "list_for_settings",
    "resolve_credentials",
    "resolve_data_link",
]
