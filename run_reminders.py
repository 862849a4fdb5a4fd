#!/usr/bin/env python
"""Run the reminder loop for one user, logging each reminder."""
import argparse
import asyncio
import logging

from habit_tracker.config import LOG_LEVEL, REMINDER_INTERVAL_MINUTES
from habit_tracker.database import get_session
from habit_tracker.logging_setup import setup_logging
from habit_tracker.notifications import LoggingNotifier, ReminderScheduler
from habit_tracker.store import TaskStore

logger = logging.getLogger("habit_tracker.reminders")


def _load_tasks(user_id: str):
    with get_session() as session:
        return TaskStore(session).list_tasks(user_id)


async def main(user_id: str, interval_minutes: float, randomize: bool, ticks: int) -> None:
    scheduler = ReminderScheduler(
        LoggingNotifier(),
        lambda: _load_tasks(user_id),
        interval_seconds=interval_minutes * 60,
        randomize=randomize,
    )
    if not await scheduler.enable():
        logger.error("Reminders could not be enabled (status=%s)", scheduler.status)
        return

    try:
        if ticks > 0:
            await asyncio.sleep(interval_minutes * 60 * (ticks - 1) + 0.1)
        else:
            await asyncio.Event().wait()
    finally:
        await scheduler.wait_closed()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id", help="Owning user id")
    parser.add_argument("--interval", type=float, default=REMINDER_INTERVAL_MINUTES, help="Minutes between reminders")
    parser.add_argument("--randomize", action="store_true", help="Pick uniformly instead of weighted")
    parser.add_argument("--ticks", type=int, default=0, help="Stop after N reminders (0 = run forever)")
    args = parser.parse_args()

    setup_logging(LOG_LEVEL)
    try:
        asyncio.run(main(args.user_id, args.interval, args.randomize, args.ticks))
    except KeyboardInterrupt:
        pass
