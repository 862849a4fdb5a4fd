"""
Reminder scheduler.

A small timer loop that, every ``interval_seconds``:
- reads the current task list from an injected provider,
- picks one task (weighted, or uniformly when ``randomize`` is set),
- hands a reminder to an injected notifier.

The scheduler owns exactly one ``asyncio.Task`` handle. Starting again cancels
the previous handle first, and ``disable()`` / ``close()`` tear it down.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from .config import REMINDER_INTERVAL_MINUTES
from .core.recurrence import is_recurring
from .core.selection import RandomSource, pick, pick_uniform

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = REMINDER_INTERVAL_MINUTES * 60

REMINDER_TITLE = "Accountability reminder"
RANDOM_REMINDER_TITLE = "Random task"


class Permission(str, Enum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class Notifier(Protocol):
    supported: bool
    permission: Permission

    async def request_permission(self) -> Permission: ...

    def notify(self, title: str, body: str, tag: str) -> None: ...


class LoggingNotifier:
    """Notifier that emits reminders through logging; grants permission on request."""

    def __init__(self, name: str = "habit_tracker.reminders") -> None:
        self.supported = True
        self.permission = Permission.DEFAULT
        self._logger = logging.getLogger(name)

    async def request_permission(self) -> Permission:
        self.permission = Permission.GRANTED
        return self.permission

    def notify(self, title: str, body: str, tag: str) -> None:
        self._logger.info("[%s] %s (tag=%s)", title, body.replace("\n", " | "), tag)


def reminder_body(task: Any) -> str:
    parts = [getattr(task, "title", "") or ""]
    repeat = getattr(task, "repeat", None)
    if is_recurring(repeat):
        parts.append(f"Pattern: {repeat}")
    return "\n".join(p for p in parts if p)


class ReminderScheduler:
    def __init__(
        self,
        notifier: Notifier,
        tasks_provider: Callable[[], Sequence[Any]],
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        randomize: bool = False,
        rng: RandomSource | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.notifier = notifier
        self.tasks_provider = tasks_provider
        self.interval_seconds = max(0.01, float(interval_seconds))
        self.randomize = randomize
        self.rng = rng
        self.clock = clock or datetime.utcnow
        self.enabled = False
        self._handle: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None and not self._handle.done()

    @property
    def status(self) -> str:
        if not self.notifier.supported:
            return "unsupported"
        permission = Permission(self.notifier.permission)
        if permission is Permission.GRANTED:
            return "active" if self.enabled else "paused"
        return permission.value

    async def enable(self) -> bool:
        """Ask for permission if needed and start the timer. Returns whether reminders are on."""
        if not self.notifier.supported:
            return False

        # Already on: keep the running timer, no extra reminder.
        if self.enabled and self.running:
            return True

        if Permission(self.notifier.permission) is not Permission.GRANTED:
            result = Permission(await self.notifier.request_permission())
            if result is not Permission.GRANTED:
                logger.info("Notification permission %s; reminders stay off", result.value)
                self.enabled = False
                return False

        self.enabled = True
        self._start()
        return True

    def disable(self) -> None:
        self.enabled = False
        self._cancel()

    def close(self) -> None:
        self.disable()

    def trigger(self) -> Any | None:
        """Send one reminder now. Returns the task reminded about, if any.

        Calls ``tasks_provider`` on the current thread; the timer loop runs it
        in a worker thread instead.
        """
        if not self._can_notify():
            return None
        return self._remind(list(self.tasks_provider()))

    def _can_notify(self) -> bool:
        return self.notifier.supported and Permission(self.notifier.permission) is Permission.GRANTED

    def _remind(self, tasks: Sequence[Any]) -> Any | None:
        if self.randomize:
            task = pick_uniform(tasks, rng=self.rng)
        else:
            task = pick(tasks, self.clock(), rng=self.rng)
        if task is None:
            return None

        self.notifier.notify(
            RANDOM_REMINDER_TITLE if self.randomize else REMINDER_TITLE,
            reminder_body(task),
            str(getattr(task, "id", "")),
        )
        return task

    def _start(self) -> None:
        self._cancel()
        self._handle = asyncio.get_running_loop().create_task(self._run())

    def _cancel(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None and not handle.done():
            handle.cancel()

    async def _run(self) -> None:
        while True:
            try:
                if self._can_notify():
                    # Providers may hit the database; keep that off the event loop.
                    tasks = await asyncio.to_thread(self.tasks_provider)
                    self._remind(list(tasks))
            except Exception:
                logger.exception("Reminder tick failed")
            await asyncio.sleep(self.interval_seconds)

    async def wait_closed(self) -> None:
        """Await the cancelled handle (useful in tests and shutdown paths)."""
        handle = self._handle
        self._cancel()
        if handle is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await handle
