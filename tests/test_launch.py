from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from seqera_flow.application.launch import resolve_launch_body
from seqera_flow.core.launch import build_resume_launch, flatten_compute_env, merge_params, split_profiles
from seqera_flow.core.settings import Connection
from seqera_flow.domain import NoLaunchSpecified, ResolutionError

CONNECTION = Connection(base_url="https://seqera.test", workspace_id="ws-1", token="tok")


def test_flatten_compute_env():
    flat = flatten_compute_env({"pipeline": "nf-core/rnaseq", "computeEnv": {"id": "ce-1", "name": "aws"}})
    assert flat == {"pipeline": "nf-core/rnaseq", "computeEnvId": "ce-1"}


def test_flatten_keeps_compute_env_without_id():
    launch = {"computeEnv": {"name": "aws"}}
    assert flatten_compute_env(launch) == launch


def test_merge_params_preserves_existing_keys():
    body = {"launch": {"paramsText": json.dumps({"a": 1, "b": 2})}}
    merge_params(body, {"b": 3}, {"c": 4})
    assert json.loads(body["launch"]["paramsText"]) == {"a": 1, "b": 3, "c": 4}


def test_merge_params_without_mappings_leaves_body_untouched():
    body = {"launch": {"paramsText": "not json"}}
    assert merge_params(body, None, "ignored") == {"launch": {"paramsText": "not json"}}


def test_merge_params_replaces_unparseable_text():
    body = {"launch": {"paramsText": "not json"}}
    merge_params(body, {"x": True})
    assert json.loads(body["launch"]["paramsText"]) == {"x": True}


def test_split_profiles():
    assert split_profiles("docker, test ,,") == ["docker", "test"]
    assert split_profiles(["a", " ", None, "b"]) == ["a", "b"]
    assert split_profiles(None) == []


def test_build_resume_launch_with_commit():
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    launch = build_resume_launch(
        {"commitId": "abc"},
        {"id": "l-1", "computeEnv": {"id": "ce-1"}, "pipeline": "p", "workDir": "s3://w", "sessionId": "s-1"},
        params_text='{"x": 1}',
        run_name=" again ",
        now=moment,
    )
    assert launch["resume"] is True
    assert launch["revision"] == "abc"
    assert launch["computeEnvId"] == "ce-1"
    assert launch["runName"] == "again"
    assert launch["paramsText"] == '{"x": 1}'
    assert launch["dateCreated"] == "2024-01-02T03:04:05Z"


def test_build_resume_launch_without_commit_disables_resume():
    launch = build_resume_launch({}, {"id": "l-1", "resumeDir": "s3://resume"})
    assert launch["resume"] is False
    assert "revision" not in launch
    assert launch["workDir"] == "s3://resume"


@pytest.mark.asyncio
async def test_explicit_body_is_cloned_and_params_merged(platform):
    body = {"launch": {"pipeline": "p", "paramsText": json.dumps({"a": 1})}}
    client = platform.factory(CONNECTION)

    resolved = await resolve_launch_body(
        client, body=body, launchpad_name=None, workspace_id="ws-1", params={"a": 2}, named_params={"b": "x"}
    )

    assert json.loads(resolved["launch"]["paramsText"]) == {"a": 2, "b": "x"}
    assert json.loads(body["launch"]["paramsText"]) == {"a": 1}
    assert platform.requests == []


@pytest.mark.asyncio
async def test_launchpad_takes_precedence_over_body(platform):
    platform.add("GET", "/pipelines", {"pipelines": [{"name": "rnaseq-dev", "pipelineId": 6}, {"name": "rnaseq", "pipelineId": 7}]})
    platform.add("GET", "/pipelines/7/launch", {"launch": {"pipeline": "nf-core/rnaseq", "computeEnv": {"id": "ce-9"}}})
    client = platform.factory(CONNECTION)

    resolved = await resolve_launch_body(
        client, body={"launch": {"pipeline": "other"}}, launchpad_name="rnaseq", workspace_id="ws-1"
    )

    assert resolved == {"launch": {"pipeline": "nf-core/rnaseq", "computeEnvId": "ce-9"}}
    search = platform.calls("GET", "/pipelines")[0]
    assert search.url.params["search"] == "rnaseq"
    assert search.url.params["workspaceId"] == "ws-1"
    assert search.url.params["visibility"] == "all"


@pytest.mark.asyncio
async def test_launchpad_without_exact_match_uses_first_result(platform):
    platform.add("GET", "/pipelines", {"pipelines": [{"name": "rnaseq-dev", "pipelineId": 6}]})
    platform.add("GET", "/pipelines/6/launch", {"launch": {"pipeline": "dev"}})

    resolved = await resolve_launch_body(
        platform.factory(CONNECTION), body=None, launchpad_name="rnaseq", workspace_id="ws-1"
    )

    assert resolved["launch"]["pipeline"] == "dev"


@pytest.mark.asyncio
async def test_unknown_launchpad_fails_without_submitting(platform):
    platform.add("GET", "/pipelines", {"pipelines": []})

    with pytest.raises(ResolutionError) as excinfo:
        await resolve_launch_body(platform.factory(CONNECTION), body=None, launchpad_name="nope", workspace_id="ws-1")

    assert excinfo.value.stage == "launchpad"
    assert platform.calls("POST", "/workflow/launch") == []


@pytest.mark.asyncio
async def test_missing_launch_raises(platform):
    with pytest.raises(NoLaunchSpecified):
        await resolve_launch_body(platform.factory(CONNECTION), body={"other": 1}, launchpad_name=None, workspace_id=None)


@pytest.mark.asyncio
async def test_missing_launch_allowed_when_not_required(platform):
    resolved = await resolve_launch_body(
        platform.factory(CONNECTION), body=None, launchpad_name=None, workspace_id=None, require_launch=False
    )
    assert resolved == {}
