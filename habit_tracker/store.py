"""
Task store: the query layer over the ``tasks`` / ``task_completions`` tables.

Every read and write is scoped by the owning user. Database failures are
rolled back and re-raised as :class:`StoreError` with a readable message;
retries and pooling are the engine's business, not ours.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .config import RECENT_WINDOW_DAYS
from .models import Task as TaskModel, TaskCompletion
from .schemas.history import CompletionEntry
from .schemas.task import Task as TaskSchema, TaskCreate

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A store operation failed; ``message`` is safe to show to the caller."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TaskNotFoundError(LookupError):
    pass


class TaskStore:
    def __init__(self, session: Session, recent_window_days: int = RECENT_WINDOW_DAYS) -> None:
        self.session = session
        self.recent_window_days = recent_window_days

    # ------------------------------------------------------------------ reads

    def recent_completion_counts(
        self,
        user_id: str,
        task_ids: Iterable[str],
        since: datetime,
    ) -> Dict[str, int]:
        ids = list(task_ids)
        if not ids:
            return {}
        query = (
            select(TaskCompletion.task_id, func.count(TaskCompletion.id))
            .where(
                TaskCompletion.user_id == user_id,
                TaskCompletion.task_id.in_(ids),
                TaskCompletion.completed_at >= since,
            )
            .group_by(TaskCompletion.task_id)
        )
        rows = self._run(lambda: self.session.exec(query).all(), "load completion counts")
        return {task_id: count for task_id, count in rows}

    def list_tasks(self, user_id: str, now: Optional[datetime] = None) -> List[TaskSchema]:
        query = (
            select(TaskModel)
            .where(TaskModel.user_id == user_id)
            .order_by(TaskModel.created_at.desc())
        )
        rows = self._run(lambda: self.session.exec(query).all(), "load tasks")
        return self._enrich(user_id, rows, now)

    def list_recurring_tasks(self, user_id: str, now: Optional[datetime] = None) -> List[TaskSchema]:
        query = (
            select(TaskModel)
            .where(
                TaskModel.user_id == user_id,
                TaskModel.repeat.is_not(None),
                TaskModel.repeat != "none",
            )
            .order_by(TaskModel.created_at.desc())
        )
        rows = self._run(lambda: self.session.exec(query).all(), "load recurring tasks")
        return self._enrich(user_id, rows, now)

    def get_task(self, user_id: str, task_id: str, now: Optional[datetime] = None) -> TaskSchema:
        row = self._get_row(user_id, task_id)
        return self._enrich(user_id, [row], now)[0]

    def list_completions(self, user_id: str, since: datetime) -> List[CompletionEntry]:
        query = (
            select(TaskCompletion, TaskModel.title)
            .join(TaskModel, TaskModel.id == TaskCompletion.task_id, isouter=True)
            .where(TaskCompletion.user_id == user_id, TaskCompletion.completed_at >= since)
            .order_by(TaskCompletion.completed_at.desc())
        )
        rows = self._run(lambda: self.session.exec(query).all(), "load completion history")
        return [
            CompletionEntry(
                id=completion.id,
                task_id=completion.task_id,
                user_id=completion.user_id,
                completed_at=completion.completed_at,
                task_title=title,
            )
            for completion, title in rows
        ]

    # ----------------------------------------------------------------- writes

    def create_task(self, user_id: str, payload: TaskCreate) -> TaskSchema:
        task = TaskModel(
            user_id=user_id,
            title=payload.title,
            repeat=payload.repeat if payload.repeat is not None else "daily",
            due_date=payload.due_date,
            priority=payload.priority if payload.priority is not None else 1.0,
        )

        def _insert():
            self.session.add(task)
            self.session.commit()
            self.session.refresh(task)
            return task

        created = self._write(_insert, "create task")
        logger.info("Created task %s for user %s (repeat=%s)", created.id, user_id, created.repeat)
        return TaskSchema.model_validate(created)

    def toggle_completion(self, user_id: str, task_id: str, now: Optional[datetime] = None) -> TaskSchema:
        """
        Flip a task's completion state and keep the completion log in step.

        Toggle-on stamps ``completed_at`` and appends a log row; toggle-off
        clears it and removes the task's most recent log row. Both steps are
        committed in a single transaction.
        """
        now = now or datetime.utcnow()
        task = self._get_row(user_id, task_id)
        completing = not task.completed

        def _toggle():
            task.completed = completing
            task.completed_at = now if completing else None
            self.session.add(task)

            if completing:
                self.session.add(
                    TaskCompletion(task_id=task.id, user_id=user_id, completed_at=now)
                )
            else:
                latest = self.session.exec(
                    select(TaskCompletion)
                    .where(TaskCompletion.task_id == task.id, TaskCompletion.user_id == user_id)
                    .order_by(TaskCompletion.completed_at.desc())
                    .limit(1)
                ).first()
                if latest is not None:
                    self.session.delete(latest)

            self.session.commit()
            self.session.refresh(task)
            return task

        updated = self._write(_toggle, "toggle task completion")
        logger.info(
            "Task %s %s by user %s",
            task_id,
            "completed" if completing else "reopened",
            user_id,
        )
        return self._enrich(user_id, [updated], now)[0]

    # ---------------------------------------------------------------- helpers

    def _get_row(self, user_id: str, task_id: str) -> TaskModel:
        query = select(TaskModel).where(TaskModel.id == task_id, TaskModel.user_id == user_id)
        row = self._run(lambda: self.session.exec(query).first(), "load task")
        if row is None:
            raise TaskNotFoundError(task_id)
        return row

    def _enrich(self, user_id: str, rows, now: Optional[datetime]) -> List[TaskSchema]:
        since = (now or datetime.utcnow()) - timedelta(days=self.recent_window_days)
        counts = self.recent_completion_counts(user_id, (row.id for row in rows), since)
        return [
            TaskSchema.model_validate(row).model_copy(
                update={"recent_completions": counts.get(row.id, 0)}
            )
            for row in rows
        ]

    def _run(self, fn, action: str):
        try:
            return fn()
        except SQLAlchemyError as exc:
            logger.error("Store failed to %s: %s", action, exc)
            raise StoreError(f"Failed to {action}") from exc

    def _write(self, fn, action: str):
        try:
            return fn()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Store failed to %s, rolled back: %s", action, exc)
            raise StoreError(f"Failed to {action}") from exc
