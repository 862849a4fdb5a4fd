"""
Push-notification trigger.

Called by a scheduler / push service with ``{"user_id": ...}``; answers with
the task to remind the user about (or null). Runs the same selection code as
the in-process reminder loop.
"""

import logging
import random
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session

from ..clock import get_now, get_rng
from ..core import pick
from ..database import get_db
from ..store import StoreError, TaskStore

router = APIRouter()
logger = logging.getLogger(__name__)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.api_route("/smart-task-notify", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def smart_task_notify(
    request: Request,
    now: datetime = Depends(get_now),
    rng: random.Random = Depends(get_rng),
    db: Session = Depends(get_db),
):
    if request.method != "POST":
        return _error("Method not allowed", 405)

    try:
        payload = await request.json()
    except ValueError:
        payload = {}

    user_id = payload.get("user_id") if isinstance(payload, dict) else None
    if not user_id:
        return _error("Missing user_id in payload", 400)

    try:
        tasks = TaskStore(db).list_recurring_tasks(str(user_id), now=now)
        chosen = pick(tasks, now, rng=rng)
    except StoreError as exc:
        return _error(exc.message, 500)
    except Exception:
        logger.exception("smart-task-notify failed for user %s", user_id)
        return _error("Unexpected error", 500)

    logger.info("smart-task-notify user=%s chose=%s", user_id, chosen.id if chosen else None)
    return JSONResponse({"task": chosen.model_dump(mode="json") if chosen else None})
