from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from fastapi import APIRouter, Query

from seqera_flow.core.settings import Connection
from seqera_flow.domain import ApiError, ResolutionError, SeqeraError, TransportError
from seqera_flow.infrastructure.platform import SeqeraClient, get_client_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/config", tags=["config"])


def _failure_message(exc: SeqeraError, default: str) -> str:
    if isinstance(exc, ApiError):
        if exc.status_code in (401, 403):
            return "Invalid API token"
        return f"API error: {exc.status_code}"
    if isinstance(exc, TransportError):
        if isinstance(exc.__cause__, httpx.TimeoutException):
            return "Connection timeout - check network"
        if isinstance(exc.__cause__, httpx.ConnectError):
            return "Connection failed - check base URL and network"
    if isinstance(exc, ResolutionError):
        return str(exc)
    return default


def _missing(base_url: str | None, token: str | None) -> dict[str, Any] | None:
    if not token:
        return {"success": False, "message": "No API token provided", "isEmptyToken": True}
    if not base_url:
        return {"success": False, "message": "No base URL provided"}
    return None


def _client(base_url: str, token: str) -> SeqeraClient:
    return get_client_factory()(Connection(base_url=base_url.rstrip("/"), token=token))


@router.get("/connectivity-check")
async def connectivity_check(
    base_url: str | None = Query(default=None, alias="baseUrl"),
    token: str | None = Query(default=None),
) -> dict:
    missing = _missing(base_url, token)
    if missing:
        return missing

    client = _client(base_url, token)
    try:
        data = await client.user_info()
    except SeqeraError as exc:
        return {"success": False, "message": _failure_message(exc, "Connection failed")}
    finally:
        await client.aclose()

    user = data.get("user")
    if not user:
        return {"success": False, "message": "Invalid response from Seqera API"}
    return {"success": True, "user": {"userName": user.get("userName"), "email": user.get("email")}}


@router.get("/workspaces")
async def organisation_workspaces(
    base_url: str | None = Query(default=None, alias="baseUrl"),
    token: str | None = Query(default=None),
) -> dict:
    """Organisations the token can see, each with its workspaces, sorted by name."""
    missing = _missing(base_url, token)
    if missing:
        missing.pop("isEmptyToken", None)
        return missing

    client = _client(base_url, token)
    try:
        organizations = await client.list_organizations()
        organizations = sorted(
            (org for org in organizations if org.get("name") != "community"),
            key=lambda org: str(org.get("name") or ""),
        )

        async def with_workspaces(org: dict[str, Any]) -> dict[str, Any]:
            try:
                workspaces = await client.list_org_workspaces(org.get("orgId"))
            except SeqeraError as exc:
                logger.warning("Failed to fetch workspaces for org %s: %s", org.get("name"), exc)
                workspaces = []
            return {
                "orgId": org.get("orgId"),
                "orgName": org.get("name"),
                "orgFullName": org.get("fullName"),
                "workspaces": sorted(workspaces, key=lambda ws: str(ws.get("name") or "")),
            }

        entries = await asyncio.gather(*(with_workspaces(org) for org in organizations))
    except SeqeraError as exc:
        return {"success": False, "message": _failure_message(exc, "Failed to fetch workspaces")}
    finally:
        await client.aclose()

    return {"success": True, "organizations": [entry for entry in entries if entry["workspaces"]]}
