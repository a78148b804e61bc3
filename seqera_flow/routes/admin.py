from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request

from seqera_flow.core.settings import ConnectionOverrides, PlatformConfig, load_platform_config, resolve_connection
from seqera_flow.domain import SeqeraError
from seqera_flow.infrastructure.platform import get_client_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _platform_config(request: Request) -> PlatformConfig:
    return getattr(request.app.state, "platform_config", None) or load_platform_config()


@router.get("/pipelines")
async def pipeline_choices(
    request: Request,
    search: str = Query(default=""),
    workspace_id: str | None = Query(default=None, alias="workspaceId"),
) -> list[dict]:
    """Pipeline names for the launchpad auto-complete; empty on any failure."""
    connection = resolve_connection(ConnectionOverrides(workspace_id=workspace_id), shared=_platform_config(request))
    if not connection.workspace_id:
        return []

    client = get_client_factory()(connection)
    try:
        pipelines = await client.list_pipelines(connection.workspace_id, search=search)
    except SeqeraError as exc:
        logger.warning("Pipeline lookup failed: %s", exc)
        return []
    finally:
        await client.aclose()

    return [{"value": pipeline.get("name"), "label": pipeline.get("name")} for pipeline in pipelines]
