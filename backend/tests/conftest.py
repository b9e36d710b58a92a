"""Test fixtures for the backend."""
import os
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_backend.db")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="onboarding-uploads-"))
os.environ.setdefault("APP_ENV", "test")

from onboarding.database import Database  # noqa: E402
from onboarding.dependencies import get_database, storage  # noqa: E402
from onboarding.main import app  # noqa: E402


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> Database:
    """A fresh SQLite database per test, wired into the app."""

    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test_backend.db'}", reconnect_delay=0)
    await db.connect()
    app.dependency_overrides[get_database] = lambda: db
    yield db
    app.dependency_overrides.pop(get_database, None)
    await db.close()


@pytest.fixture
def upload_dir() -> Path:
    """The storage directory, emptied after each test."""

    yield storage.directory
    for path in storage.directory.iterdir():
        if path.is_file():
            path.unlink()


@pytest_asyncio.fixture
async def client(database: Database, upload_dir: Path) -> AsyncClient:
    """Provide an HTTP client for integration tests."""

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture
def employee_form():
    """Build the text fields of a valid onboarding submission."""

    def build(email: str = "ada@example.com", **overrides: str) -> dict[str, str]:
        form = {
            "emp_name": "Ada Lovelace",
            "emp_email": email,
            "emp_dob": "1990-05-17",
            "emp_mobile": "+15550100",
            "emp_address": "12 Analytical Row",
            "emp_city": "London",
            "emp_state": "Greater London",
            "emp_zipcode": "NW1",
            "emp_bank": "First Bank",
            "emp_account": "001122334455",
            "emp_ifsc": "FBNK0001234",
            "emp_job_role": "Engineer",
            "emp_department": "R&D",
            "emp_experience_status": "true",
            "emp_company_name": "Difference Engines Ltd",
            "emp_years_of_experience": "4",
            "emp_joining_date": "2024-02-01",
            "emp_terms_accepted": "true",
        }
        form.update(overrides)
        return form

    return build
