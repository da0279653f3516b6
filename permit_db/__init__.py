# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, SessionLocal, get_db, get_db_service
from .enums import ApplicationStatus, CompanyStatus, ValidationStatus
from .models import Application, AuditEvent, Company, Document, User

__all__ = [
    "Base",
    "DatabaseService",
    "SessionLocal",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "ApplicationStatus",
    "CompanyStatus",
    "ValidationStatus",
    # Models
    "Application",
    "AuditEvent",
    "Company",
    "Document",
    "User",
]
