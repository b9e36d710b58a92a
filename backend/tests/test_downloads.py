"""Integration tests for single and bulk document downloads."""
import io
import zipfile
from pathlib import Path
from urllib.parse import quote

import pytest
from httpx import AsyncClient

from onboarding import crud
from onboarding.routers import employees as employees_router

PDF_BYTES = b"%PDF-1.4\n% onboarding test document\n%%EOF\n"
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 28 + b"\xff\xd9"


async def create_employee(client: AsyncClient, email: str, files: dict) -> None:
    response = await client.post(
        "/save-employee",
        data={"emp_name": "Alan Turing", "emp_email": email},
        files=files,
    )
    assert response.status_code == 201


async def stored_name(client: AsyncClient, email: str, field: str) -> str:
    employees = (await client.get("/employees")).json()
    employee = next(emp for emp in employees if emp["emp_email"] == email)
    return employee[field].rsplit("/", 1)[-1]


@pytest.mark.asyncio
async def test_download_returns_uploaded_bytes(client: AsyncClient) -> None:
    await create_employee(
        client,
        "alan@example.com",
        {
            "emp_ssc_doc": ("ssc.pdf", PDF_BYTES, "application/pdf"),
            "emp_inter_doc": ("inter.jpg", JPEG_BYTES, "image/jpeg"),
        },
    )

    response = await client.post("/download", json={"empEmail": "alan@example.com", "docField": "emp_ssc_doc"})
    assert response.status_code == 200
    assert response.content == PDF_BYTES
    assert response.headers["content-type"] == "application/pdf"
    filename = await stored_name(client, "alan@example.com", "emp_ssc_doc")
    assert response.headers["content-disposition"] == f'attachment; filename="{filename}"'

    response = await client.post("/download", json={"empEmail": "alan@example.com", "docField": "emp_inter_doc"})
    assert response.status_code == 200
    assert response.content == JPEG_BYTES
    assert response.headers["content-type"] == "image/jpeg"


@pytest.mark.asyncio
async def test_download_document_never_uploaded(client: AsyncClient) -> None:
    await create_employee(client, "alan@example.com", {"emp_ssc_doc": ("ssc.pdf", PDF_BYTES, "application/pdf")})

    response = await client.post("/download", json={"empEmail": "alan@example.com", "docField": "emp_grad_doc"})
    assert response.status_code == 404
    assert response.json() == {"error": "Document not found for this employee"}


@pytest.mark.asyncio
async def test_download_file_deleted_out_of_band(client: AsyncClient, upload_dir: Path) -> None:
    await create_employee(client, "alan@example.com", {"emp_ssc_doc": ("ssc.pdf", PDF_BYTES, "application/pdf")})
    (upload_dir / await stored_name(client, "alan@example.com", "emp_ssc_doc")).unlink()

    response = await client.post("/download", json={"empEmail": "alan@example.com", "docField": "emp_ssc_doc"})
    assert response.status_code == 404
    assert response.json() == {"error": "File missing on server"}


@pytest.mark.asyncio
async def test_download_unknown_employee(client: AsyncClient) -> None:
    response = await client.post("/download", json={"empEmail": "nobody@example.com", "docField": "emp_ssc_doc"})
    assert response.status_code == 404
    assert response.json() == {"error": "Employee not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"empEmail": "alan@example.com", "docField": "emp_photo"},
        {"empEmail": "alan@example.com"},
        {"docField": "emp_ssc_doc"},
        {"empEmail": "", "docField": "emp_ssc_doc"},
    ],
)
async def test_download_rejects_invalid_parameters(client: AsyncClient, payload: dict) -> None:
    response = await client.post("/download", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request parameters"}


@pytest.mark.asyncio
async def test_download_rejects_malformed_body(client: AsyncClient) -> None:
    response = await client.post(
        "/download", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request parameters"}


@pytest.mark.asyncio
async def test_download_all_contains_present_documents(client: AsyncClient) -> None:
    await create_employee(
        client,
        "alan@example.com",
        {
            "emp_ssc_doc": ("ssc.pdf", PDF_BYTES, "application/pdf"),
            "emp_grad_doc": ("grad.pdf", PDF_BYTES + b"grad", "application/pdf"),
        },
    )

    response = await client.post("/download-all", json={"empEmail": "alan@example.com"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert response.headers["content-disposition"] == 'attachment; filename="alan@example.com-documents.zip"'

    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert sorted(archive.namelist()) == ["emp_grad_doc.pdf", "emp_ssc_doc.pdf"]
        assert archive.read("emp_ssc_doc.pdf") == PDF_BYTES
        assert archive.read("emp_grad_doc.pdf") == PDF_BYTES + b"grad"


@pytest.mark.asyncio
async def test_download_all_skips_missing_files(client: AsyncClient, upload_dir: Path) -> None:
    await create_employee(
        client,
        "alan@example.com",
        {
            "emp_ssc_doc": ("ssc.pdf", PDF_BYTES, "application/pdf"),
            "emp_inter_doc": ("inter.jpg", JPEG_BYTES, "image/jpeg"),
        },
    )
    (upload_dir / await stored_name(client, "alan@example.com", "emp_ssc_doc")).unlink()

    response = await client.post("/download-all", json={"empEmail": "alan@example.com"})
    assert response.status_code == 200
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == ["emp_inter_doc.jpg"]


@pytest.mark.asyncio
async def test_download_all_without_documents(client: AsyncClient) -> None:
    await create_employee(client, "alan@example.com", {})

    response = await client.post("/download-all", json={"empEmail": "alan@example.com"})
    assert response.status_code == 404
    assert response.json() == {"error": "No documents found for this employee"}


@pytest.mark.asyncio
async def test_download_all_unknown_employee(client: AsyncClient) -> None:
    response = await client.post("/download-all", json={"empEmail": "nobody@example.com"})
    assert response.status_code == 404
    assert response.json() == {"error": "Employee not found"}


@pytest.mark.asyncio
async def test_download_all_requires_email(client: AsyncClient) -> None:
    response = await client.post("/download-all", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Employee email is required"}


@pytest.mark.asyncio
async def test_download_all_with_non_ascii_email(client: AsyncClient) -> None:
    email = "用户@例子.中国"
    await create_employee(client, email, {"emp_ssc_doc": ("ssc.pdf", PDF_BYTES, "application/pdf")})

    single = await client.post("/download", json={"empEmail": email, "docField": "emp_ssc_doc"})
    assert single.status_code == 200

    response = await client.post("/download-all", json={"empEmail": email})
    assert response.status_code == 200
    assert response.headers["content-disposition"] == (
        f"attachment; filename*=utf-8''{quote(email + '-documents.zip', safe='')}"
    )
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == ["emp_ssc_doc.pdf"]


@pytest.mark.asyncio
async def test_download_store_failure(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def broken_lookup(db, email):
        raise OSError("database unreachable")

    monkeypatch.setattr(crud, "get_employee_by_email", broken_lookup)

    response = await client.post("/download", json={"empEmail": "alan@example.com", "docField": "emp_ssc_doc"})
    assert response.status_code == 500
    assert response.json() == {"error": "Server error during download"}


@pytest.mark.asyncio
async def test_download_all_archive_failure(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    await create_employee(client, "alan@example.com", {"emp_ssc_doc": ("ssc.pdf", PDF_BYTES, "application/pdf")})

    def broken_archive(entries):
        raise OSError("disk error")

    monkeypatch.setattr(employees_router, "build_archive", broken_archive)

    response = await client.post("/download-all", json={"empEmail": "alan@example.com"})
    assert response.status_code == 500
    assert response.json() == {"error": "Server error while creating zip file"}
