"""Dispatch of match handlers when a new stable color is published."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from rvr_color.core.asyncio_utils import create_logged_task, has_running_loop
from rvr_color.core.logging_utils import LoggerLike, ensure_structured_logger

from .color_types import Color
from .errors import HandlerLoopError
from .spec_matcher import BoundColorSpec

Handler = Callable[["CompletionToken", Color, BoundColorSpec], Any]


@dataclass(slots=True, eq=False)
class HandlerRecord:
    callback: Handler
    is_running: bool = False
    invocations: int = 0

    @property
    def label(self) -> str:
        return getattr(self.callback, "__qualname__", None) or repr(self.callback)


@dataclass(slots=True)
class _SpecEntry:
    spec: BoundColorSpec
    handlers: list[HandlerRecord] = field(default_factory=list)


class CompletionToken:
    """The ``done`` callable passed to a handler; clears its running flag once."""

    __slots__ = ("_record", "_called")

    def __init__(self, record: HandlerRecord) -> None:
        self._record = record
        self._called = False

    def __call__(self) -> None:
        if self._called:
            return
        self._called = True
        self._record.is_running = False

    @property
    def called(self) -> bool:
        return self._called


async def _await_handler(result: Awaitable[Any]) -> Any:
    return await result


class EventRegistry:
    """Ordered handler lists per spec handle, with one invocation in flight per handler."""

    def __init__(self, logger: LoggerLike = None) -> None:
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)
        self._entries: dict[int, _SpecEntry] = {}
        self._pending: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, spec: BoundColorSpec) -> bool:
        return spec.spec_id in self._entries

    @property
    def pending_tasks(self) -> frozenset[asyncio.Task[Any]]:
        return frozenset(self._pending)

    def register(self, spec: BoundColorSpec, handler: Any) -> None:
        """Append ``handler`` for ``spec``; a non-callable handler deregisters the spec."""
        if not callable(handler):
            self.deregister(spec)
            return

        entry = self._entries.get(spec.spec_id)
        if entry is None:
            entry = self._entries[spec.spec_id] = _SpecEntry(spec)
        record = HandlerRecord(handler)
        entry.handlers.append(record)
        self._logger.debug("Registered handler %s on spec %d (%d total)", record.label, spec.spec_id, len(entry.handlers))

    def deregister(self, spec: BoundColorSpec) -> bool:
        entry = self._entries.pop(spec.spec_id, None)
        if entry is None:
            return False
        self._logger.debug("Cleared %d handler(s) from spec %d", len(entry.handlers), spec.spec_id)
        return True

    def handler_count(self, spec: BoundColorSpec) -> int:
        entry = self._entries.get(spec.spec_id)
        return len(entry.handlers) if entry else 0

    def running_count(self, spec: BoundColorSpec) -> int:
        entry = self._entries.get(spec.spec_id)
        return sum(1 for record in entry.handlers if record.is_running) if entry else 0

    def dispatch(self, color: Color) -> int:
        """Invoke every idle handler of every spec matching ``color``.

        Returns the number of handlers invoked. Handlers registered or removed
        by a handler take effect on the next dispatch. An async handler that
        cannot be scheduled does not stop the others; the first such failure
        is raised once every eligible handler has run.
        """
        invoked = 0
        deferred: Optional[HandlerLoopError] = None
        for entry in list(self._entries.values()):
            if not entry.spec.region.contains(color):
                continue
            for record in list(entry.handlers):
                if record.is_running:
                    self._logger.debug("Handler %s on spec %d still running; skipped", record.label, entry.spec.spec_id)
                    continue
                try:
                    self._invoke(record, color, entry.spec)
                except HandlerLoopError as exc:
                    self._logger.error("Handler %s on spec %d not run: %s", record.label, entry.spec.spec_id, exc)
                    if deferred is None:
                        deferred = exc
                    continue
                invoked += 1
        if deferred is not None:
            raise deferred
        return invoked

    def _invoke(self, record: HandlerRecord, color: Color, spec: BoundColorSpec) -> None:
        record.is_running = True
        record.invocations += 1
        token = CompletionToken(record)
        try:
            result = record.callback(token, color, spec)
        except Exception:
            # Only the completion token clears the running flag.
            self._logger.exception("Handler %s on spec %d raised", record.label, spec.spec_id)
            return

        if inspect.isawaitable(result):
            if not has_running_loop():
                if inspect.iscoroutine(result):
                    result.close()
                record.is_running = False
                record.invocations -= 1
                raise HandlerLoopError(f"async handler {record.label} needs a running event loop")
            create_logged_task(
                _await_handler(result),
                logger=self._logger,
                context=f"match-handler:{record.label}",
                pending=self._pending,
            )

    def cancel_pending(self) -> int:
        """Cancel async handler bodies that are still running."""
        pending = [task for task in self._pending if not task.done()]
        for task in pending:
            task.cancel()
        return len(pending)


__all__ = ["CompletionToken", "EventRegistry", "Handler", "HandlerRecord"]
