from __future__ import annotations

import json
import logging
from typing import Any

from seqera_flow.application.base import Adapter
from seqera_flow.core.schema import DatasetCreateSettings
from seqera_flow.core.settings import PlatformConfig
from seqera_flow.domain import ConfigurationError, InputEvent, SeqeraError
from seqera_flow.infrastructure.host import Host
from seqera_flow.infrastructure.platform import ClientFactory

logger = logging.getLogger(__name__)


def _as_bytes(contents: Any) -> bytes:
    if isinstance(contents, bytes):
        return contents
    if isinstance(contents, str):
        return contents.encode("utf-8")
    return json.dumps(contents).encode("utf-8")


class DatasetCreate(Adapter):
    """Create a dataset and upload the message contents as its first version."""

    def __init__(
        self,
        host: Host,
        settings: DatasetCreateSettings | None = None,
        *,
        shared: PlatformConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(host, settings or DatasetCreateSettings(), shared=shared, client_factory=client_factory)
        host.on_input(self.handle_input)

    async def handle_input(self, event: InputEvent) -> None:
        settings: DatasetCreateSettings = self.settings  # type: ignore[assignment]
        name = (event.dataset_name or settings.dataset_name or "").strip()
        contents = event.file_contents if event.file_contents is not None else event.payload
        if not name:
            self.show_error()
            raise ConfigurationError("datasetName not provided", stage="create")
        if contents is None:
            self.show_error()
            raise ConfigurationError("File contents are required", stage="upload")

        connection = self.connection_for(event.overrides())
        client = self.client_for(connection)
        try:
            self.show("blue", "ring", "creating")
            try:
                dataset_id, _ = await client.create_dataset(
                    name,
                    connection.workspace_id,
                    description=event.description or settings.description,
                )
            except SeqeraError as exc:
                exc.stage = exc.stage or "create"
                raise
            if not dataset_id:
                raise ConfigurationError("Failed to get dataset ID from create response", stage="create")

            self.show("yellow", "ring", "uploading")
            try:
                uploaded = await client.upload_dataset(
                    dataset_id,
                    _as_bytes(contents),
                    filename=f"{name}.{settings.file_type}",
                    mime_type=settings.mime_type,
                    workspace_id=connection.workspace_id,
                    has_header=settings.has_header,
                )
            except SeqeraError as exc:
                exc.stage = exc.stage or "upload"
                raise
        except SeqeraError as exc:
            self.show_error()
            self.host.report_error(f"Seqera dataset {exc.stage or 'create'} failed: {exc}", event.passthrough())
            raise
        finally:
            await client.aclose()

        logger.info("Uploaded dataset %s (%s)", name, dataset_id)
        self.show("green", "dot", "uploaded")
        self.host.emit(0, {**event.passthrough(), "payload": uploaded, "datasetId": dataset_id})


__all__ = ["DatasetCreate"]
