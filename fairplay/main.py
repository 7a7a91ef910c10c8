"""Fairplay Scheduler service.

Hosts the scheduled batch jobs and a small read-only HTTP surface for
health and job status.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from fairplay.core.config import settings
from fairplay.core.database import create_db_and_tables
from fairplay.core.scheduler import shutdown_scheduler, start_scheduler
from fairplay.routes import auth, jobs

# Configure logging
log_dir = Path.home() / ".logs" / "fairplay"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    logger.info("Starting Fairplay Scheduler")
    create_db_and_tables()
    if settings.scheduler_enabled:
        start_scheduler()
    yield
    if settings.scheduler_enabled:
        shutdown_scheduler()
    logger.info("Fairplay Scheduler shut down")


app = FastAPI(
    title=settings.app_name,
    description="Fair sign-up lists for recurring group events: reveal, attendance snapshot and calendar invites",
    version="0.1.0",
    lifespan=lifespan,
)

origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(jobs.router)


@app.get("/")
async def root(request: Request):
    """Redirect root to the job status."""
    rp = request.scope.get("root_path", "")
    return RedirectResponse(f"{rp}/jobs/status")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
