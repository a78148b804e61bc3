"""Boundary between the adapters and the flow runtime that hosts them.

The runtime owns message routing and the node lifecycle. Adapters only see
the small :class:`Host` contract: they subscribe to input and close
notifications, push messages to numbered output channels and keep a status
badge up to date. :class:`InMemoryHost` is a complete implementation that
records everything, suitable for embedding the adapters in a plain asyncio
program and for tests.
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Protocol

from seqera_flow.domain import InputEvent

logger = logging.getLogger(__name__)

InputHandler = Callable[[InputEvent], Awaitable[None]]
CloseHandler = Callable[[], Any]


def format_timestamp(moment: datetime | None = None) -> str:
    return (moment or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


@dataclass(slots=True, frozen=True)
class NodeStatus:
    """Status badge shown next to an adapter; presentational only."""

    fill: str
    shape: str
    text: str
    timestamp: str = field(default_factory=format_timestamp)

    @classmethod
    def error(cls) -> "NodeStatus":
        return cls("red", "dot", "error")

    @property
    def label(self) -> str:
        return f"{self.text}: {self.timestamp}"


class Host(Protocol):
    """Contract the hosting runtime fulfils for each adapter instance."""

    def on_input(self, handler: InputHandler) -> None: ...

    def on_close(self, handler: CloseHandler) -> None: ...

    def emit(self, channel: int, message: dict[str, Any]) -> None: ...

    def set_status(self, status: NodeStatus) -> None: ...

    def report_error(self, text: str, message: dict[str, Any] | None = None) -> None: ...


@dataclass(slots=True)
class Completion:
    """Outcome of one delivered input: ``error`` is ``None`` on success."""

    event: InputEvent
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class InMemoryHost:
    """Host that records emissions, statuses, errors and completions."""

    def __init__(self, name: str = "adapter") -> None:
        self.name = name
        self.emitted: list[tuple[int, dict[str, Any]]] = []
        self.statuses: list[NodeStatus] = []
        self.errors: list[tuple[str, dict[str, Any] | None]] = []
        self.completions: list[Completion] = []
        self._input_handlers: list[InputHandler] = []
        self._close_handlers: list[CloseHandler] = []

    # ------------------------------------------------------------------
    # Host contract
    # ------------------------------------------------------------------
    def on_input(self, handler: InputHandler) -> None:
        self._input_handlers.append(handler)

    def on_close(self, handler: CloseHandler) -> None:
        self._close_handlers.append(handler)

    def emit(self, channel: int, message: dict[str, Any]) -> None:
        self.emitted.append((channel, message))

    def set_status(self, status: NodeStatus) -> None:
        self.statuses.append(status)

    def report_error(self, text: str, message: dict[str, Any] | None = None) -> None:
        logger.error("%s: %s", self.name, text)
        self.errors.append((text, message))

    # ------------------------------------------------------------------
    # runtime side
    # ------------------------------------------------------------------
    async def deliver(self, event: InputEvent) -> Completion:
        """Hand ``event`` to every input handler and record the outcome."""

        completion = Completion(event)
        for handler in self._input_handlers:
            try:
                await handler(event)
            except Exception as exc:
                completion.error = exc
                break
        self.completions.append(completion)
        return completion

    async def close(self) -> None:
        for handler in self._close_handlers:
            result = handler()
            if inspect.isawaitable(result):
                await result

    def channel(self, index: int) -> list[dict[str, Any]]:
        return [message for channel, message in self.emitted if channel == index]

    @property
    def status(self) -> NodeStatus | None:
        return self.statuses[-1] if self.statuses else None


__all__ = [
    "CloseHandler",
    "Completion",
    "Host",
    "InMemoryHost",
    "InputHandler",
    "NodeStatus",
    "format_timestamp",
]
