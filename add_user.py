#!/usr/bin/env python
"""Seed a demo user with a handful of recurring tasks."""
import logging

from sqlmodel import select

from habit_tracker.database import SessionLocal, create_tables
from habit_tracker.logging_setup import setup_logging
from habit_tracker.models import User
from habit_tracker.routers.auth import get_password_hash
from habit_tracker.schemas.task import TaskCreate
from habit_tracker.store import TaskStore

logger = logging.getLogger("habit_tracker.seed")

DEMO_EMAIL = "test@example.com"
DEMO_PASSWORD = "password"
DEMO_TASKS = [
    TaskCreate(title="Drink water", repeat="daily"),
    TaskCreate(title="Water the plants", repeat="every_3_days", priority=0.5),
    TaskCreate(title="Gym", repeat="weekly_mon,wed,fri", priority=1.5),
    TaskCreate(title="Read a chapter", repeat="weekly_3x"),
]

setup_logging()
create_tables()

db = SessionLocal()
try:
    user = db.exec(select(User).where(User.email == DEMO_EMAIL)).first()
    if user:
        logger.info("User %s already exists", DEMO_EMAIL)
    else:
        user = User(email=DEMO_EMAIL, hashed_password=get_password_hash(DEMO_PASSWORD))
        db.add(user)
        db.commit()
        db.refresh(user)

        store = TaskStore(db)
        for task in DEMO_TASKS:
            store.create_task(user.id, task)
        logger.info("Demo user created: %s / %s (id=%s)", DEMO_EMAIL, DEMO_PASSWORD, user.id)
finally:
    db.close()
