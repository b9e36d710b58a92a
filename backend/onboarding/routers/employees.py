"""Employee onboarding endpoints."""
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..config import Settings, get_settings
from ..database import Database
from ..dependencies import get_database, get_db_session, get_storage, receive_documents
from ..errors import APIError
from ..models import DOCUMENT_FIELDS
from ..schemas import (
    DownloadAllRequest,
    DownloadRequest,
    EmployeeCreated,
    EmployeeRead,
    EmployeeSubmission,
)
from ..storage import (
    StoredUploads,
    UploadStorage,
    archive_name,
    attachment_disposition,
    build_archive,
    guess_media_type,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["employees"])


def _submission_error(exc: ValidationError) -> str:
    fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
    return f"Invalid value for {', '.join(fields)}" if fields else "Invalid request parameters"


@router.post(
    "/save-employee",
    response_model=EmployeeCreated,
    status_code=status.HTTP_201_CREATED,
)
async def save_employee(
    request: Request,
    uploads: StoredUploads = Depends(receive_documents),
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> EmployeeCreated:
    """Store one onboarding submission together with its uploaded documents."""

    try:
        fields = EmployeeSubmission.text_fields(await request.form())
        if not fields.get("emp_name") or not fields.get("emp_email"):
            raise APIError(status.HTTP_400_BAD_REQUEST, "Name and email are required")
        try:
            submission = EmployeeSubmission.model_validate(fields)
        except ValidationError as exc:
            raise APIError(status.HTTP_400_BAD_REQUEST, _submission_error(exc)) from exc

        employee_id = await crud.create_employee(db, submission, uploads.filenames)
    except APIError:
        await uploads.cleanup()
        raise
    except Exception as exc:
        await uploads.cleanup()
        logger.exception("Save employee error")
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Database error",
            details=str(exc) if settings.is_development else None,
        ) from exc

    logger.info("Saved employee %s with %d document(s)", employee_id, len(uploads.filenames))
    return EmployeeCreated(success=True, employeeId=employee_id)


@router.get("/employees", response_model=list[EmployeeRead])
async def list_employees(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> list[EmployeeRead]:
    """Return all employees with document fields turned into download URLs."""

    try:
        rows = await crud.list_employees(session)
    except Exception as exc:
        logger.exception("Fetch employees error")
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error") from exc

    employees = []
    for row in rows:
        employee = EmployeeRead.model_validate(row)
        urls = {
            field: str(request.url_for("uploads", path=getattr(employee, field)))
            for field in DOCUMENT_FIELDS
            if getattr(employee, field)
        }
        employees.append(employee.model_copy(update=urls))
    return employees


@router.post("/download")
async def download_document(
    payload: DownloadRequest,
    db: Database = Depends(get_database),
    upload_storage: UploadStorage = Depends(get_storage),
) -> FileResponse:
    """Stream one stored document of an employee as an attachment."""

    if not payload.empEmail or payload.docField not in DOCUMENT_FIELDS:
        raise APIError(status.HTTP_400_BAD_REQUEST, "Invalid request parameters")

    try:
        employee = await crud.get_employee_by_email(db, payload.empEmail)
        if employee is None:
            raise APIError(status.HTTP_404_NOT_FOUND, "Employee not found")

        filename = employee[payload.docField]
        if not filename:
            raise APIError(status.HTTP_404_NOT_FOUND, "Document not found for this employee")

        if not await upload_storage.exists(filename):
            raise APIError(status.HTTP_404_NOT_FOUND, "File missing on server")
    except APIError:
        raise
    except Exception as exc:
        logger.exception("Download error")
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error during download") from exc

    path = upload_storage.path_for(filename)
    return FileResponse(path, media_type=guess_media_type(path), filename=path.name)


@router.post("/download-all")
async def download_all_documents(
    payload: DownloadAllRequest,
    db: Database = Depends(get_database),
    upload_storage: UploadStorage = Depends(get_storage),
) -> Response:
    """Return every stored document of an employee as one zip archive."""

    if not payload.empEmail:
        raise APIError(status.HTTP_400_BAD_REQUEST, "Employee email is required")

    try:
        employee = await crud.get_employee_by_email(db, payload.empEmail)
        if employee is None:
            raise APIError(status.HTTP_404_NOT_FOUND, "Employee not found")

        entries = {}
        for field in DOCUMENT_FIELDS:
            filename = employee[field]
            if filename and await upload_storage.exists(filename):
                entries[archive_name(field, filename)] = upload_storage.path_for(filename)

        if not entries:
            raise APIError(status.HTTP_404_NOT_FOUND, "No documents found for this employee")

        content = await run_in_threadpool(build_archive, entries)
        return Response(
            content=content,
            media_type="application/zip",
            headers={
                "Content-Disposition": attachment_disposition(f"{payload.empEmail}-documents.zip")
            },
        )
    except APIError:
        raise
    except Exception as exc:
        logger.exception("Download all error")
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error while creating zip file"
        ) from exc
