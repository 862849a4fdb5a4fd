import random
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from ..clock import get_now, get_rng
from ..config import ARCHIVE_AFTER_DAYS
from ..core import pick, split_tasks
from ..database import get_db
from ..models import User
from ..schemas.task import Task as TaskSchema, TaskBucketsResponse, TaskCreate, TaskSuggestion
from ..store import TaskNotFoundError, TaskStore
from .auth import get_current_user

router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> TaskStore:
    return TaskStore(db)


@router.get("/tasks", response_model=List[TaskSchema])
def list_tasks(
    now: datetime = Depends(get_now),
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_store),
):
    """All of the user's tasks, newest first, with recent completion counts."""
    return store.list_tasks(current_user.id, now=now)


@router.get("/tasks/today", response_model=TaskBucketsResponse)
def list_tasks_today(
    now: datetime = Depends(get_now),
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_store),
):
    """Tasks split into due-today, recently completed and archived lists."""
    tasks = store.list_tasks(current_user.id, now=now)
    buckets = split_tasks(tasks, now, archive_after_days=ARCHIVE_AFTER_DAYS)
    return TaskBucketsResponse(
        active=buckets.active,
        completed=buckets.completed,
        archived=buckets.archived,
    )


@router.get("/tasks/suggestion", response_model=TaskSuggestion)
def suggest_task(
    now: datetime = Depends(get_now),
    rng: random.Random = Depends(get_rng),
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_store),
):
    """Weighted pick among the user's tasks that are due today."""
    tasks = store.list_tasks(current_user.id, now=now)
    return TaskSuggestion(task=pick(tasks, now, rng=rng))


@router.post("/tasks", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_store),
):
    return store.create_task(current_user.id, task)


@router.get("/tasks/{task_id}", response_model=TaskSchema)
def get_task(
    task_id: str,
    now: datetime = Depends(get_now),
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_store),
):
    try:
        return store.get_task(current_user.id, task_id, now=now)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")


@router.patch("/tasks/{task_id}/toggle", response_model=TaskSchema)
def toggle_task_completion(
    task_id: str,
    now: datetime = Depends(get_now),
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_store),
):
    """Complete an open task, or undo the completion of a finished one."""
    try:
        return store.toggle_completion(current_user.id, task_id, now=now)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")
