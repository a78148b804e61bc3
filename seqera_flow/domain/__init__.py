"""Domain layer definitions."""

from .errors import (
    ApiError,
    ConfigurationError,
    NoLaunchSpecified,
    ResolutionError,
    SeqeraError,
    TransportError,
)
from .workflows import (
    DataLinkListing,
    InputEvent,
    MonitorState,
    StudioStatus,
    Submission,
    WorkflowStatus,
    WorkflowSummary,
)

__all__ = [
    "ApiError",
    "ConfigurationError",
    "DataLinkListing",
    "InputEvent",
    "MonitorState",
    "NoLaunchSpecified",
    "ResolutionError",
    "SeqeraError",
    "StudioStatus",
    "Submission",
    "TransportError",
    "WorkflowStatus",
    "WorkflowSummary",
]
