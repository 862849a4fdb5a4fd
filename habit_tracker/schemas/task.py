from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import List, Optional


class TaskBase(BaseModel):
    title: str
    due_date: Optional[date] = None
    repeat: Optional[str] = "daily"
    priority: Optional[float] = 1.0


class TaskCreate(TaskBase):
    """Schema for creating new tasks; rejects blank titles and negative priorities."""
    title: str = Field(min_length=1)
    priority: Optional[float] = Field(default=1.0, ge=0)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value


class Task(TaskBase):
    """Stored task as returned by the API, with the trailing completion count.

    No input constraints here: rows written before validation existed (or by
    other clients) must still load.
    """
    id: str
    user_id: str
    repeat: Optional[str] = None
    completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: datetime
    recent_completions: int = 0

    class Config:
        from_attributes = True


class TaskBucketsResponse(BaseModel):
    active: List[Task]
    completed: List[Task]
    archived: List[Task]


class TaskSuggestion(BaseModel):
    task: Optional[Task] = None
