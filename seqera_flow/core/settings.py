"""Layered resolution of platform connection details.

Values are looked up, field by field, in this order: per-message overrides,
adapter settings, the shared :class:`PlatformConfig` and finally built-in
defaults. Resolution produces a fresh immutable :class:`Connection`; none of
the layers is mutated.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "https://api.cloud.seqera.io"


@dataclass(slots=True, frozen=True)
class PlatformConfig:
    """Connection defaults shared by every adapter in a process."""

    base_url: str = DEFAULT_BASE_URL
    workspace_id: str | None = None
    token: str | None = None


@dataclass(slots=True, frozen=True)
class ConnectionOverrides:
    base_url: str | None = None
    workspace_id: str | None = None
    source_workspace_id: str | None = None
    token: str | None = None


@dataclass(slots=True, frozen=True)
class Connection:
    base_url: str
    workspace_id: str | None = None
    source_workspace_id: str | None = None
    token: str | None = None

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


def load_platform_config() -> PlatformConfig:
    """Read the shared configuration from the environment."""

    return PlatformConfig(
        base_url=os.getenv("SEQERA_BASE_URL") or DEFAULT_BASE_URL,
        workspace_id=os.getenv("SEQERA_WORKSPACE_ID") or None,
        token=os.getenv("SEQERA_ACCESS_TOKEN") or None,
    )


def _first(*values: object) -> str | None:
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def resolve_connection(
    *overrides: ConnectionOverrides | None,
    shared: PlatformConfig | None = None,
    legacy_token: str | None = None,
) -> Connection:
    """Collapse the configuration layers into a :class:`Connection`.

    ``overrides`` are consulted in the order given. The bearer token priority
    is explicit override, then the shared configuration, then the adapter's
    own (deprecated) credential.
    """

    layers = [layer for layer in overrides if layer is not None]
    shared = shared or PlatformConfig()

    base_url = _first(*(layer.base_url for layer in layers), shared.base_url) or DEFAULT_BASE_URL
    return Connection(
        base_url=base_url.rstrip("/"),
        workspace_id=_first(*(layer.workspace_id for layer in layers), shared.workspace_id),
        source_workspace_id=_first(*(layer.source_workspace_id for layer in layers)),
        token=_first(*(layer.token for layer in layers), shared.token, legacy_token),
    )


__all__ = [
    "DEFAULT_BASE_URL",
    "Connection",
    "ConnectionOverrides",
    "PlatformConfig",
    "load_platform_config",
    "resolve_connection",
]
