"""Reusable FastAPI dependencies."""
from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import Database, database
from .storage import StoredUploads, UploadStorage

settings = get_settings()
storage = UploadStorage(settings.upload_dir, max_bytes=settings.max_upload_bytes)


def get_database() -> Database:
    """Return the process-wide Database."""
    return database


def get_storage() -> UploadStorage:
    """Return the process-wide upload storage."""
    return storage


async def get_db_session(
    db: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields a pooled AsyncSession."""
    async for session in db.session():
        yield session


async def receive_documents(
    request: Request,
    upload_storage: UploadStorage = Depends(get_storage),
) -> AsyncGenerator[StoredUploads, None]:
    """
    Validate and store the document parts of a multipart request
    before the handler runs.

    Raises UploadRejected when any part is refused; in that case no
    file from the request is left on disk. The parsed form, and the
    temporary files behind its parts, are closed once the request is done.
    """
    form = await request.form()
    try:
        yield await upload_storage.accept(form)
    finally:
        await form.close()
