"""Infrastructure layer exports."""

from .host import Completion, Host, InMemoryHost, NodeStatus, format_timestamp
from .platform import (
    SeqeraClient,
    configure_client_factory,
    get_client_factory,
    mask_headers,
    reset_client_factory,
)
from .scheduler import PollScheduler

__all__ = [
    "Completion",
    "Host",
    "InMemoryHost",
    "NodeStatus",
    "PollScheduler",
    "SeqeraClient",
    "configure_client_factory",
    "format_timestamp",
    "get_client_factory",
    "mask_headers",
    "reset_client_factory",
]
