"""SQLAlchemy models exposed by the backend."""
from .base import Base
from .employee import DOCUMENT_FIELDS, Employee

__all__ = ["Base", "DOCUMENT_FIELDS", "Employee"]
