"""Pydantic schemas used across the backend API."""
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, field_validator
from starlette.datastructures import FormData


class EmployeeBase(BaseModel):
    """Employee fields shared by submissions and responses."""

    emp_name: str
    emp_email: str
    emp_dob: date | None = None
    emp_mobile: str | None = None
    emp_address: str | None = None
    emp_city: str | None = None
    emp_state: str | None = None
    emp_zipcode: str | None = None
    emp_bank: str | None = None
    emp_account: str | None = None
    emp_ifsc: str | None = None
    emp_job_role: str | None = None
    emp_department: str | None = None
    emp_experience_status: bool | None = None
    emp_company_name: str | None = None
    emp_years_of_experience: int | None = None
    emp_joining_date: date | None = None
    emp_terms_accepted: bool = False


class EmployeeSubmission(EmployeeBase):
    """Text fields of a `/save-employee` form, typed for insertion."""

    emp_experience_status: bool = False

    @field_validator("emp_experience_status", "emp_terms_accepted", mode="before")
    @classmethod
    def literal_true(cls, value: Any) -> bool:
        # Only the exact string "true" counts; anything else is false.
        return value == "true" or value is True

    @classmethod
    def text_fields(cls, form: FormData) -> dict[str, str | None]:
        """Return the non-file form values, with empty strings as None."""

        return {
            key: (value or None)
            for key, value in form.multi_items()
            if isinstance(value, str)
        }


class EmployeeRead(EmployeeBase):
    """Employee representation returned by the API."""

    id: int
    emp_experience_doc: str | None = None
    emp_ssc_doc: str | None = None
    emp_inter_doc: str | None = None
    emp_grad_doc: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class EmployeeCreated(BaseModel):
    success: bool = True
    employeeId: int


class DownloadRequest(BaseModel):
    """Body of `/download`; values are checked by the handler."""

    empEmail: str | None = None
    docField: str | None = None


class DownloadAllRequest(BaseModel):
    empEmail: str | None = None
