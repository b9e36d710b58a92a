"""SQL run by the employee endpoints."""
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from . import models, schemas
from .database import Database


async def create_employee(
    db: Database, submission: schemas.EmployeeSubmission, documents: Mapping[str, str]
) -> int:
    """Insert one employee row on the writer connection and return its id."""

    values = submission.model_dump()
    for field in models.DOCUMENT_FIELDS:
        values[field] = documents.get(field)
    rows = await db.execute(
        insert(models.Employee).values(**values).returning(models.Employee.id)
    )
    return rows[0]["id"]


async def list_employees(session: AsyncSession) -> Sequence[models.Employee]:
    """Load every employee through a pooled session, in store order."""

    result = await session.execute(select(models.Employee))
    return list(result.scalars().all())


async def get_employee_by_email(db: Database, email: str) -> dict[str, Any] | None:
    """Fetch a single employee row by email on the writer connection."""

    rows = await db.execute(
        select(models.Employee.__table__).where(models.Employee.emp_email == email)
    )
    return dict(rows[0]) if rows else None
