from __future__ import annotations

import asyncio
import contextvars
import logging
import threading
import weakref
from collections.abc import Awaitable, Callable
from typing import Any

from src.geoprocessing.domain.exceptions import UncaughtFault

logger = logging.getLogger(__name__)

FaultRecorder = Callable[[UncaughtFault], Awaitable[Any]]

_active: contextvars.ContextVar[FaultSupervisor | None] = contextvars.ContextVar(
    "fault_supervisor", default=None
)


class _ProcessSlot:
    """
    Admits one supervised block per process at a time.

    Thread and loop hooks are process-wide, so a fault can only be attributed
    to its computation while no other computation runs. Exit requests are held
    until no block is running or waiting, so queued invocations are not lost.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock] = (
            weakref.WeakKeyDictionary()
        )
        self._occupants = 0
        self._exits: list[Callable[[], None]] = []

    async def acquire(self, loop: asyncio.AbstractEventLoop) -> None:
        lock = self._locks.get(loop)
        if lock is None:
            lock = self._locks[loop] = asyncio.Lock()
        self._occupants += 1
        try:
            await lock.acquire()
        except BaseException:
            self._occupants -= 1
            self._drain()
            raise

    def release(self, loop: asyncio.AbstractEventLoop) -> None:
        self._locks[loop].release()
        self._occupants -= 1
        self._drain()

    def exit_when_idle(self, exit_process: Callable[[], None]) -> None:
        self._exits.append(exit_process)
        self._drain()

    def _drain(self) -> None:
        if self._occupants:
            return
        exits, self._exits = self._exits, []
        for exit_process in exits:
            exit_process()


_slot = _ProcessSlot()


class FaultSupervisor:
    """
    Error boundary around one computation.

    While active it captures faults that escape the computation's own control
    flow: exceptions in threads, exceptions of asyncio tasks nobody awaited,
    and non-``Exception`` errors raised through the block. The first fault is
    handed to ``on_fault`` (which persists it). ``exit_process`` runs after
    that write finishes and once no other supervised block is pending.
    """

    def __init__(self, on_fault: FaultRecorder, exit_process: Callable[[], None]) -> None:
        self._on_fault = on_fault
        self._exit_process = exit_process
        self._loop: asyncio.AbstractEventLoop | None = None
        self._token: contextvars.Token | None = None
        self._writes: list[asyncio.Task] = []
        self._previous_thread_hook = threading.excepthook
        self._previous_loop_handler: Any = None
        self.fault: UncaughtFault | None = None

    @property
    def faulted(self) -> bool:
        return self.fault is not None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            raise RuntimeError("FaultSupervisor is used outside of its async with block")
        return self._loop

    async def __aenter__(self) -> FaultSupervisor:
        loop = asyncio.get_running_loop()
        await _slot.acquire(loop)
        self._loop = loop
        self._token = _active.set(self)
        self._previous_thread_hook = threading.excepthook
        self._previous_loop_handler = loop.get_exception_handler()
        threading.excepthook = self._thread_hook
        loop.set_exception_handler(self._loop_handler)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc is not None and not isinstance(exc, Exception):
                self._capture(UncaughtFault(exc_type.__name__, exc))
            await self.settle()
        finally:
            self._uninstall()
            _slot.release(self.loop)
        return False

    async def settle(self) -> Any:
        """Wait for pending fault writes and return the last write's result."""
        if not self._writes:
            return None
        writes, self._writes = self._writes, []
        results = await asyncio.gather(*writes)
        return results[-1]

    def _uninstall(self) -> None:
        # Hooks replaced by someone else while we were active stay in place.
        if threading.excepthook == self._thread_hook:
            threading.excepthook = self._previous_thread_hook
        if self.loop.get_exception_handler() == self._loop_handler:
            self.loop.set_exception_handler(self._previous_loop_handler)
        if self._token is not None:
            _active.reset(self._token)
            self._token = None

    def _capture(self, fault: UncaughtFault) -> None:
        if self.fault is not None:
            logger.warning("Additional uncaught fault ignored", extra={"origin": fault.origin})
            return
        self.fault = fault
        self._writes.append(self.loop.create_task(self._record(fault)))

    async def _record(self, fault: UncaughtFault) -> Any:
        try:
            return await self._on_fault(fault)
        finally:
            _slot.exit_when_idle(self._exit_process)

    def _thread_hook(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        logger.error(
            "Uncaught exception in thread",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
            extra={"thread_name": getattr(args.thread, "name", None)},
        )
        fault = UncaughtFault("Uncaught exception", args.exc_value)
        self.loop.call_soon_threadsafe(self._capture, fault)

    def _loop_handler(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        exc = context.get("exception")
        if exc is None or not self._owns(context):
            if self._previous_loop_handler is not None:
                self._previous_loop_handler(loop, context)
            else:
                loop.default_exception_handler(context)
            return
        logger.error("Unhandled exception in event loop", exc_info=exc)
        self._capture(UncaughtFault("Unhandled exception", exc))

    def _owns(self, context: dict[str, Any]) -> bool:
        origin = context.get("task") or context.get("future")
        get_context = getattr(origin, "get_context", None)
        if get_context is None:
            return True
        return get_context().get(_active) is self
