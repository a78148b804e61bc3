from __future__ import annotations

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parents[1]))

from seqera_flow.core.schema import (
    AdapterSettings,
    DataLinkPollSettings,
    DatasetCreateSettings,
    LaunchMonitorSettings,
    WorkflowPollSettings,
)
from seqera_flow.core.settings import (
    DEFAULT_BASE_URL,
    ConnectionOverrides,
    PlatformConfig,
    load_platform_config,
    resolve_connection,
)


def test_defaults_apply_when_nothing_is_configured():
    connection = resolve_connection()
    assert connection.base_url == DEFAULT_BASE_URL
    assert connection.workspace_id is None
    assert connection.token is None


def test_override_layers_win_in_order():
    shared = PlatformConfig(base_url="https://shared.test/", workspace_id="ws-shared", token="shared-token")
    message = ConnectionOverrides(workspace_id="ws-msg")
    node = ConnectionOverrides(base_url="https://node.test/", workspace_id="ws-node")

    connection = resolve_connection(message, node, shared=shared, legacy_token="legacy")

    assert connection.base_url == "https://node.test"
    assert connection.workspace_id == "ws-msg"
    assert connection.token == "shared-token"
    assert connection.url("/workflow") == "https://node.test/workflow"


def test_blank_values_fall_through():
    shared = PlatformConfig(workspace_id="ws-shared")
    connection = resolve_connection(ConnectionOverrides(workspace_id="   "), shared=shared)
    assert connection.workspace_id == "ws-shared"


def test_token_priority():
    shared = PlatformConfig(token="shared-token")
    assert resolve_connection(ConnectionOverrides(token="explicit"), shared=shared, legacy_token="old").token == "explicit"
    assert resolve_connection(shared=PlatformConfig(), legacy_token="old").token == "old"


def test_load_platform_config_reads_environment(monkeypatch):
    monkeypatch.setenv("SEQERA_BASE_URL", "https://env.test")
    monkeypatch.setenv("SEQERA_WORKSPACE_ID", "42")
    monkeypatch.setenv("SEQERA_ACCESS_TOKEN", "secret")
    config = load_platform_config()
    assert config == PlatformConfig(base_url="https://env.test", workspace_id="42", token="secret")


def test_load_platform_config_defaults(monkeypatch):
    for name in ("SEQERA_BASE_URL", "SEQERA_WORKSPACE_ID", "SEQERA_ACCESS_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    assert load_platform_config() == PlatformConfig()


def test_settings_reject_unknown_fields_and_bad_intervals():
    with pytest.raises(ValidationError):
        AdapterSettings(unexpected=True)
    with pytest.raises(ValidationError):
        LaunchMonitorSettings(poll_interval=0)


def test_poll_interval_properties():
    assert WorkflowPollSettings(poll_frequency=30, poll_units="seconds").interval_seconds == 30
    assert WorkflowPollSettings().interval_seconds == 60
    assert DataLinkPollSettings().interval_seconds == 900
    assert DataLinkPollSettings(poll_frequency="00:30").interval_seconds == 30
    assert DataLinkPollSettings(poll_frequency="whenever").interval_seconds == 900


def test_dataset_mime_type():
    assert DatasetCreateSettings().mime_type == "text/csv"
    assert DatasetCreateSettings(file_type="tsv").mime_type == "text/tab-separated-values"
