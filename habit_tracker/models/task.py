from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime
from datetime import date, datetime
from typing import List, Optional
from uuid import uuid4


class Task(SQLModel, table=True):
    """A user's recurring task / habit.

    ``completed`` and ``completed_at`` move together: the toggle operation
    sets both or clears both. Timestamps are naive UTC.
    """
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(index=True, foreign_key="users.id")
    title: str
    completed: bool = Field(default=False)
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True, sa_type=DateTime())
    due_date: Optional[date] = None
    # Null means "no pattern"; the API layer applies the "daily" default on create.
    repeat: Optional[str] = Field(default=None)
    priority: Optional[float] = Field(default=1.0)

    user: Optional["User"] = Relationship(back_populates="tasks")
    completions: List["TaskCompletion"] = Relationship(back_populates="task")


class TaskCompletion(SQLModel, table=True):
    """Append-only log entry: one row per completion toggle-on."""
    __tablename__ = "task_completions"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    task_id: str = Field(index=True, foreign_key="tasks.id")
    user_id: str = Field(index=True, foreign_key="users.id")
    completed_at: datetime = Field(default_factory=datetime.utcnow, index=True, sa_type=DateTime())

    task: Optional[Task] = Relationship(back_populates="completions")
