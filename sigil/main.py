from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
from pathlib import Path

from sigil.constants import CORS_ALLOWED_ORIGINS, DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV
from sigil.database import Base, engine
from sigil import models  # Import models to register them with Base
from sigil.exceptions import (
    SigilException, ValidationException, InvalidTimeFormatException,
    TaskNotFoundException, RecordNotFoundException, HighGoalNotFoundException,
    BreachNotFoundException, TodoNotFoundException, SkillNotFoundException,
    FriendNotFoundException,
)
from sigil.routes import records, tasks, stats, goals, skills, penalties, todos, social
from sigil.services.scheduler_service import start_scheduler, stop_scheduler

LOG_DIR = os.getenv("SIGIL_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("SIGIL_LOG_FILE", "sigil.log")

try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("sigil")

Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Sigil API",
    description="Gamified record tracker: levels, streaks, goals, constellations and dares",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

NOT_FOUND_EXCEPTIONS = (
    TaskNotFoundException, RecordNotFoundException, HighGoalNotFoundException,
    BreachNotFoundException, TodoNotFoundException, SkillNotFoundException,
    FriendNotFoundException,
)


@app.exception_handler(SigilException)
async def sigil_exception_handler(request: Request, exc: SigilException):
    if isinstance(exc, NOT_FOUND_EXCEPTIONS):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (ValidationException, InvalidTimeFormatException)):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        logger.error(f"Unhandled error on {request.url.path}: {exc}")
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


for module in (records, tasks, stats, goals, skills, penalties, todos, social):
    app.include_router(module.router)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Sigil API started. Logging to: {log_path}")
    start_scheduler()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Sigil API")
    stop_scheduler()


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "Sigil API", "status": "active"}
