"""Pure task logic shared by the API, the notify trigger and the reminder scheduler."""

from .buckets import TaskBuckets, split_tasks
from .history import CompletionSummary, DailyCount, Streak, best_streak, current_streak, summarize
from .recurrence import days_between, is_due, weekday_abbreviation
from .selection import pick, pick_uniform, task_weight

__all__ = [
    "CompletionSummary",
    "DailyCount",
    "Streak",
    "TaskBuckets",
    "best_streak",
    "current_streak",
    "days_between",
    "is_due",
    "pick",
    "pick_uniform",
    "split_tasks",
    "summarize",
    "task_weight",
    "weekday_abbreviation",
]
