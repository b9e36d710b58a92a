"""FastAPI application entry point."""
import asyncio
import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import get_settings
from .database import database
from .dependencies import storage
from .errors import install_error_handlers
from .logging_config import configure_logging
from .routers.employees import router as employees_router

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

storage.ensure_directory()

app = FastAPI(title="Employee Onboarding Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=True,
)
install_error_handlers(app)
app.include_router(employees_router)
app.mount("/uploads", StaticFiles(directory=storage.directory), name="uploads")


@app.on_event("startup")
async def on_startup() -> None:
    """Connect to the database in the background, retrying until it is reachable."""

    app.state.connect_task = asyncio.create_task(database.connect_with_retry())


@app.on_event("shutdown")
async def on_shutdown() -> None:
    """Stop any pending connection attempt and release database resources."""

    task = getattr(app.state, "connect_task", None)
    if task is not None and not task.done():
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    await database.close()


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple readiness probe for uptime checks."""

    return {"status": "ok"}
