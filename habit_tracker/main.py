import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import CORS_ORIGINS, LOG_LEVEL
from .database import create_tables
from .logging_setup import setup_logging
from .routers import auth, history, notify, tasks
from .store import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL)
    create_tables()
    logger.info("Habit tracker API started")
    yield


app = FastAPI(
    title="Habit Tracker API",
    description="Recurring tasks, completion history and weighted reminder suggestions",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(tasks.router, prefix="/api", tags=["tasks"])
app.include_router(history.router, prefix="/api", tags=["history"])
app.include_router(notify.router, prefix="/functions", tags=["functions"])


@app.get("/")
def read_root():
    return {"message": "Habit Tracker API"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
