"""Disk storage for uploaded onboarding documents."""
from __future__ import annotations

import io
import logging
import mimetypes
import random
import time
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote

from fastapi import status
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile

from .errors import APIError
from .models import DOCUMENT_FIELDS

logger = logging.getLogger(__name__)

ALLOWED_MIME = {"application/pdf", "image/jpeg", "image/png"}
MAX_BYTES = 5 * 1024 * 1024  # 5MB


class UploadRejected(APIError):
    """A file part failed validation; nothing has been written for the request."""


def generate_filename(original: str | None) -> str:
    """Return `<ms timestamp>-<random 9 digits><original extension>`."""

    suffix = Path(original or "").suffix
    return f"{int(time.time() * 1000)}-{random.randint(100_000_000, 999_999_999)}{suffix}"


def guess_media_type(path: Path) -> str:
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type or "application/octet-stream"


@dataclass
class PendingUpload:
    field: str
    original_name: str
    content_type: str
    content: bytes


@dataclass
class StoredUploads:
    """Files written for one request, keyed by document field."""

    storage: "UploadStorage"
    filenames: dict[str, str] = field(default_factory=dict)

    async def cleanup(self) -> None:
        """Delete every file written for this request. Errors are logged only."""

        for filename in self.filenames.values():
            await self.storage.delete(filename)


class UploadStorage:
    """Validates, names and stores uploaded documents in one directory."""

    def __init__(self, directory: Path, max_bytes: int = MAX_BYTES) -> None:
        self.directory = Path(directory)
        self.max_bytes = max_bytes

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        # Stored names never contain separators; strip any that a row might carry.
        return self.directory / Path(filename).name

    async def exists(self, filename: str) -> bool:
        return await run_in_threadpool(self.path_for(filename).is_file)

    async def accept(self, form: FormData) -> StoredUploads:
        """Validate every document part in `form`, then write them all to disk.

        Raises UploadRejected before anything is written when a part has an
        unexpected name, is repeated, has a disallowed type or is too large.
        """

        pending: dict[str, PendingUpload] = {}
        for name, value in form.multi_items():
            if not isinstance(value, UploadFile):
                continue
            if not value.filename:
                continue
            if name not in DOCUMENT_FIELDS or name in pending:
                raise UploadRejected(status.HTTP_400_BAD_REQUEST, "Unexpected field")
            content_type = value.content_type or ""
            if content_type not in ALLOWED_MIME:
                raise UploadRejected(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, "Invalid file type")
            content = await value.read(self.max_bytes + 1)
            if len(content) > self.max_bytes:
                raise UploadRejected(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "File too large")
            pending[name] = PendingUpload(name, value.filename, content_type, content)

        stored = StoredUploads(self)
        try:
            for upload in pending.values():
                stored.filenames[upload.field] = await run_in_threadpool(self._write, upload)
        except OSError:
            await stored.cleanup()
            raise
        return stored

    async def delete(self, filename: str) -> None:
        try:
            await run_in_threadpool(self.path_for(filename).unlink, missing_ok=True)
        except OSError:
            logger.exception("File cleanup error for %s", filename)

    def _write(self, upload: PendingUpload) -> str:
        while True:
            filename = generate_filename(upload.original_name)
            try:
                with open(self.directory / filename, "xb") as fh:
                    fh.write(upload.content)
            except FileExistsError:
                continue
            logger.debug("Stored %s for %s as %s", upload.original_name, upload.field, filename)
            return filename


def build_archive(entries: dict[str, Path]) -> bytes:
    """Zip `entries` (archive name -> file on disk) into an in-memory buffer."""

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for arcname, path in entries.items():
            archive.write(path, arcname=arcname)
    return buffer.getvalue()


def attachment_disposition(filename: str) -> str:
    """Content-Disposition value for `filename`, RFC 5987 encoded when it is not plain ASCII."""

    if filename.isascii() and filename.isprintable() and not any(ch in filename for ch in '"\\'):
        return f'attachment; filename="{filename}"'
    return f"attachment; filename*=utf-8''{quote(filename, safe='')}"


def archive_name(field_name: str, filename: str) -> str:
    """Name a document inside a zip by its field, keeping the stored extension."""

    return f"{field_name}{Path(filename).suffix}"
