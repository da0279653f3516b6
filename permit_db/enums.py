# This project was developed with assistance from AI tools.
"""
Domain enums for the permit application lifecycle.

Shared domain types used by both SQLAlchemy models (permit_db package)
and Pydantic schemas (permit_api package).
"""

import enum


class ApplicationStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    CANCELLED = "cancelled"

    @classmethod
    def valid_transitions(cls) -> dict["ApplicationStatus", frozenset["ApplicationStatus"]]:
        """Allowed status transitions. Only a draft ever moves."""
        return {
            cls.DRAFT: frozenset({cls.SUBMITTED, cls.CANCELLED}),
            cls.SUBMITTED: frozenset(),
            cls.CANCELLED: frozenset(),
        }


class ValidationStatus(str, enum.Enum):
    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"


class CompanyStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"
