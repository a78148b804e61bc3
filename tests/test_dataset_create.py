from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from seqera_flow.application.datasets import DatasetCreate
from seqera_flow.core.schema import DatasetCreateSettings
from seqera_flow.core.settings import PlatformConfig
from seqera_flow.domain import ApiError, ConfigurationError, InputEvent
from seqera_flow.infrastructure.host import InMemoryHost

SHARED = PlatformConfig(base_url="https://seqera.test", workspace_id="ws-1", token="tok")


def _adapter(platform, **settings) -> InMemoryHost:
    host = InMemoryHost("dataset")
    DatasetCreate(host, DatasetCreateSettings(**settings), shared=SHARED, client_factory=platform.factory)
    return host


@pytest.mark.asyncio
async def test_creates_and_uploads(platform):
    platform.add("POST", "/datasets", {"dataset": {"id": "ds-1"}})
    platform.add("POST", "/datasets/ds-1/upload", {"version": {"datasetId": "ds-1", "version": 1}})
    host = _adapter(platform, file_type="tsv", has_header=True, description="samples")

    completion = await host.deliver(
        InputEvent(dataset_name="samples", file_contents="id\tpath\n1\ta.fq\n", context={"topic": "ds"})
    )

    assert completion.ok
    message = host.channel(0)[0]
    assert message["datasetId"] == "ds-1"
    assert message["payload"]["version"]["version"] == 1
    assert message["topic"] == "ds"

    create = platform.calls("POST", "/datasets")[0]
    assert json.loads(create.content) == {"name": "samples", "description": "samples"}
    upload = platform.calls("POST", "/datasets/ds-1/upload")[0]
    assert upload.url.params["header"] == "true"
    assert b'filename="samples.tsv"' in upload.content
    assert b"text/tab-separated-values" in upload.content
    assert [status.text for status in host.statuses] == ["creating", "uploading", "uploaded"]


@pytest.mark.asyncio
async def test_structured_payload_is_serialised(platform):
    platform.add("POST", "/datasets", {"id": "ds-2"})
    platform.add("POST", "/datasets/ds-2/upload", {})
    host = _adapter(platform, dataset_name="from-settings")

    await host.deliver(InputEvent(payload=[{"a": 1}]))

    upload = platform.calls("POST", "/datasets/ds-2/upload")[0]
    assert b'[{"a": 1}]' in upload.content
    assert "header" not in upload.url.params


@pytest.mark.asyncio
async def test_name_and_contents_are_required(platform):
    host = _adapter(platform)

    missing_name = await host.deliver(InputEvent(file_contents="a,b"))
    missing_contents = await host.deliver(InputEvent(dataset_name="x"))

    assert isinstance(missing_name.error, ConfigurationError)
    assert isinstance(missing_contents.error, ConfigurationError)
    assert platform.requests == []


@pytest.mark.asyncio
async def test_missing_dataset_id_stops_before_upload(platform):
    platform.add("POST", "/datasets", {})
    host = _adapter(platform, dataset_name="x")

    completion = await host.deliver(InputEvent(file_contents="a,b"))

    assert completion.error.stage == "create"
    assert platform.calls("POST", "/datasets/None/upload") == []
    assert len(platform.requests) == 1


@pytest.mark.asyncio
async def test_upload_failure_reports_stage(platform):
    platform.add("POST", "/datasets", {"dataset": {"id": "ds-3"}})
    platform.add("POST", "/datasets/ds-3/upload", httpx.Response(400, json={"message": "bad file"}))
    host = _adapter(platform, dataset_name="x")

    completion = await host.deliver(InputEvent(file_contents=b"a,b"))

    assert isinstance(completion.error, ApiError)
    assert completion.error.stage == "upload"
    assert "upload" in host.errors[0][0]
