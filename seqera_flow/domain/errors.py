"""Error taxonomy shared by the client and the adapters."""
from __future__ import annotations

from typing import Any


class SeqeraError(RuntimeError):
    """Base class; ``stage`` names the step that failed (``launch``, ``poll``...)."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage

    def detail(self) -> dict[str, Any]:
        return {"message": str(self)}


class ConfigurationError(SeqeraError):
    """Required input (identity, body, name) missing before any call was made."""


class NoLaunchSpecified(ConfigurationError):
    """Neither a request body nor a launchpad reference was supplied."""


class ResolutionError(SeqeraError):
    """A named launchpad could not be resolved into a launch configuration."""


class TransportError(SeqeraError):
    """The request never produced a response."""


class ApiError(SeqeraError):
    """The platform answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int, body: Any = None, stage: str | None = None) -> None:
        super().__init__(message, stage=stage)
        self.status_code = status_code
        self.body = body

    def detail(self) -> dict[str, Any]:
        return {"status": self.status_code, "data": self.body}


__all__ = [
    "ApiError",
    "ConfigurationError",
    "NoLaunchSpecified",
    "ResolutionError",
    "SeqeraError",
    "TransportError",
]
