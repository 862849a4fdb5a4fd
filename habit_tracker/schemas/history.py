from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


class CompletionEntry(BaseModel):
    id: str
    task_id: str
    user_id: str
    completed_at: datetime
    task_title: Optional[str] = None

    class Config:
        from_attributes = True


class StreakOut(BaseModel):
    current: int
    best: int


class DailyCountOut(BaseModel):
    date: str
    count: int


class CompletionInsights(BaseModel):
    """Completion history plus the aggregates charted next to the task list."""
    entries: List[CompletionEntry]
    last_7_count: int
    last_30_count: int
    streak: StreakOut
    daily_series: List[DailyCountOut]
