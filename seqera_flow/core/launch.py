"""Pure helpers shaping launch request bodies."""
from __future__ import annotations

import copy
import json
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping


def flatten_compute_env(launch: Mapping[str, Any]) -> dict[str, Any]:
    """Replace an embedded ``computeEnv`` object by a flat ``computeEnvId``."""

    flattened = dict(launch)
    compute_env = flattened.get("computeEnv")
    if isinstance(compute_env, Mapping) and compute_env.get("id"):
        flattened["computeEnvId"] = compute_env["id"]
        del flattened["computeEnv"]
    return flattened


def parse_params_text(params_text: Any) -> dict[str, Any]:
    if not params_text or not isinstance(params_text, str):
        return {}
    try:
        parsed = json.loads(params_text)
    except json.JSONDecodeError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def merge_params(body: dict[str, Any], *overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge parameter maps into ``body['launch']['paramsText']``.

    Existing parameters survive unless a later mapping overrides the same key.
    ``body`` is updated in place and returned.
    """

    layers = [layer for layer in overrides if isinstance(layer, Mapping)]
    if not layers:
        return body

    launch = body.setdefault("launch", {})
    merged = parse_params_text(launch.get("paramsText"))
    for layer in layers:
        merged.update(layer)
    launch["paramsText"] = json.dumps(merged)
    return body


def split_profiles(profiles: str | Iterable[Any] | None) -> list[str]:
    if profiles is None:
        return []
    if isinstance(profiles, str):
        candidates: Iterable[Any] = profiles.split(",")
    else:
        candidates = profiles
    return [str(item).strip() for item in candidates if item is not None and str(item).strip()]


def build_resume_launch(
    workflow: Mapping[str, Any],
    workflow_launch: Mapping[str, Any],
    *,
    params_text: str | None = None,
    run_name: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build the minimal launch body that relaunches ``workflow`` with resume.

    A workflow cancelled before it ran any task has no commit to resume from;
    in that case ``resume`` is false and no ``revision`` is sent.
    """

    compute_env = workflow_launch.get("computeEnv") or {}
    commit = workflow_launch.get("resumeCommitId") or workflow_launch.get("revision") or workflow.get("commitId")
    moment = now or datetime.now(timezone.utc)

    launch: dict[str, Any] = {
        "id": workflow_launch.get("id"),
        "computeEnvId": compute_env.get("id") or workflow_launch.get("computeEnvId"),
        "pipeline": workflow_launch.get("pipeline"),
        "workDir": workflow_launch.get("workDir") or workflow_launch.get("resumeDir"),
        "sessionId": workflow_launch.get("sessionId"),
        "resume": bool(commit),
        "pullLatest": bool(workflow_launch.get("pullLatest") or False),
        "stubRun": bool(workflow_launch.get("stubRun") or False),
        "dateCreated": moment.isoformat().replace("+00:00", "Z"),
    }
    if commit:
        launch["revision"] = commit
    if params_text:
        launch["paramsText"] = params_text
    if run_name and run_name.strip():
        launch["runName"] = run_name.strip()
    return launch


def clone_body(body: Any) -> dict[str, Any] | None:
    if not isinstance(body, Mapping):
        return None
    return copy.deepcopy(dict(body))


__all__ = [
    "build_resume_launch",
    "clone_body",
    "flatten_compute_env",
    "merge_params",
    "parse_params_text",
    "split_profiles",
]
