#!/usr/bin/env python
"""Run the habit tracker API server."""
import os
from pathlib import Path

import uvicorn

from habit_tracker.config import LOG_LEVEL
from habit_tracker.logging_setup import setup_logging

# Run from the repo root so the default sqlite:///./habit_tracker.db lands here
os.chdir(Path(__file__).resolve().parent)

if __name__ == "__main__":
    setup_logging(LOG_LEVEL)
    uvicorn.run(
        "habit_tracker.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_config=None,
    )
