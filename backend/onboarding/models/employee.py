"""Employee onboarding record."""
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# Columns holding a generated filename from the storage directory.
DOCUMENT_FIELDS = (
    "emp_experience_doc",
    "emp_ssc_doc",
    "emp_inter_doc",
    "emp_grad_doc",
)


class Employee(Base):
    """One row per onboarding submission; documents are stored by filename."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    emp_name: Mapped[str] = mapped_column(String(255), nullable=False)
    emp_email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    emp_dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    emp_mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
    emp_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    emp_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    emp_state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    emp_zipcode: Mapped[str | None] = mapped_column(String(20), nullable=True)

    emp_bank: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emp_account: Mapped[str | None] = mapped_column(String(50), nullable=True)
    emp_ifsc: Mapped[str | None] = mapped_column(String(20), nullable=True)

    emp_job_role: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emp_department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emp_experience_status: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    emp_company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emp_years_of_experience: Mapped[int | None] = mapped_column(Integer, nullable=True)
    emp_joining_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    emp_experience_doc: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emp_ssc_doc: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emp_inter_doc: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emp_grad_doc: Mapped[str | None] = mapped_column(String(255), nullable=True)

    emp_terms_accepted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
