from datetime import datetime, timedelta

from fastapi import APIRouter, Depends

from ..clock import get_now
from ..config import CHART_WINDOW_DAYS, HISTORY_WINDOW_DAYS
from ..core import summarize
from ..models import User
from ..schemas.history import CompletionInsights, DailyCountOut, StreakOut
from ..store import TaskStore
from .auth import get_current_user
from .tasks import get_store

router = APIRouter()


@router.get("/history", response_model=CompletionInsights)
def completion_history(
    now: datetime = Depends(get_now),
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_store),
):
    """Completion log for the history window with streaks and a daily chart series."""
    since = now - timedelta(days=HISTORY_WINDOW_DAYS)
    entries = store.list_completions(current_user.id, since)
    summary = summarize((entry.completed_at for entry in entries), now, window_days=CHART_WINDOW_DAYS)

    return CompletionInsights(
        entries=entries,
        last_7_count=summary.last_7_count,
        last_30_count=summary.last_30_count,
        streak=StreakOut(current=summary.streak.current, best=summary.streak.best),
        daily_series=[DailyCountOut(date=d.date, count=d.count) for d in summary.daily_series],
    )
