"""Resolution of launch request bodies."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from seqera_flow.core.launch import clone_body, flatten_compute_env, merge_params
from seqera_flow.domain import NoLaunchSpecified, SeqeraError
from seqera_flow.infrastructure.platform import SeqeraClient

logger = logging.getLogger(__name__)


async def resolve_launchpad(client: SeqeraClient, name: str, workspace_id: str | None) -> dict[str, Any]:
    """Turn a saved pipeline name into a submission body ``{"launch": ...}``."""

    try:
        pipeline = await client.find_pipeline(name, workspace_id)
        launch = await client.fetch_launch_config(pipeline.get("pipelineId"), workspace_id)
    except SeqeraError as exc:
        exc.stage = exc.stage or "launchpad"
        raise
    logger.debug("Resolved launchpad %r to pipeline %s", name, pipeline.get("pipelineId"))
    return {"launch": flatten_compute_env(launch)}


async def resolve_launch_body(
    client: SeqeraClient,
    *,
    body: Mapping[str, Any] | None,
    launchpad_name: str | None,
    workspace_id: str | None,
    params: Mapping[str, Any] | None = None,
    named_params: Mapping[str, Any] | None = None,
    require_launch: bool = True,
) -> dict[str, Any]:
    """Produce the body to submit.

    A launchpad name takes precedence over an explicit body. The caller's
    ``body`` is never mutated. ``named_params`` are applied after ``params``
    so individually configured values win. With ``require_launch`` false an
    empty body is accepted (a resumed launch fills it in later).
    """

    if launchpad_name:
        resolved = await resolve_launchpad(client, launchpad_name, workspace_id)
    else:
        resolved = clone_body(body)

    if require_launch and (not resolved or not resolved.get("launch")):
        raise NoLaunchSpecified(
            "No launch body supplied and no launchpad name resolved; "
            "provide a body with a 'launch' section or configure a launchpad name.",
            stage="launch",
        )

    return merge_params(resolved or {}, params, named_params or None)


__all__ = ["resolve_launch_body", "resolve_launchpad"]
