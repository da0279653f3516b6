# This project was developed with assistance from AI tools.
"""
Permit licensing -- domain models

Applications, their per-requirement documents, the user/company fact
tables consumed for authorization, and the audit trail.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import ApplicationStatus, CompanyStatus, ValidationStatus


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _enum_values(enum_cls) -> list[str]:
    """Persist enum values ('draft'), not member names ('DRAFT')."""
    return [member.value for member in enum_cls]


class User(Base):
    """Applicant identity keyed by the identity-provider subject.

    ``identity_verified`` is owned by the identity verification workflow;
    this service only reads it.
    """

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), nullable=False, default="")
    name = Column(String(255), nullable=False, default="")
    identity_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id='{self.id}', verified={self.identity_verified})>"


class Company(Base):
    """Registered business owned by a user."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    registration_no = Column(String(50), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    status = Column(
        Enum(
            CompanyStatus, name="company_status", native_enum=False, values_callable=_enum_values,
        ),
        nullable=False,
        default=CompanyStatus.UNKNOWN,
    )
    owner_user_id = Column(
        String(255), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}')>"


class Application(Base):
    """License/permit application (permohonan)."""

    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_user_id = Column(
        String(255), nullable=False, index=True,
    )
    company_id = Column(
        Integer, ForeignKey("companies.id"), nullable=False, index=True,
    )
    license_type_id = Column(Integer, nullable=False, index=True)
    status = Column(
        Enum(
            ApplicationStatus, name="application_status", native_enum=False, values_callable=_enum_values,
        ),
        nullable=False,
        default=ApplicationStatus.DRAFT,
        index=True,
    )
    operational_details = Column(JSON, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    company = relationship("Company")
    documents = relationship(
        "Document", back_populates="application", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Application(id={self.id}, status='{self.status}')>"


class Document(Base):
    """Uploaded file filling one requirement slot of an application."""

    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("application_id", "requirement_id", name="uq_document_slot"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    requirement_id = Column(Integer, nullable=False)
    filename = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size_bytes = Column(Integer, nullable=False)
    storage_key = Column(String(500), nullable=False)
    content_hash = Column(String(64), nullable=True)
    validation_status = Column(
        Enum(
            ValidationStatus, name="validation_status", native_enum=False, values_callable=_enum_values,
        ),
        nullable=False,
        default=ValidationStatus.UNVALIDATED,
    )
    uploaded_by_user_id = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    application = relationship("Application", back_populates="documents")

    def __repr__(self):
        return f"<Document(id={self.id}, requirement_id={self.requirement_id})>"


class AuditEvent(Base):
    """Append-only audit trail. INSERT + SELECT only -- no UPDATE or DELETE."""

    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    prev_hash = Column(String(64), nullable=True)
    user_id = Column(String(255), nullable=True)
    event_type = Column(String(100), nullable=False, index=True)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(String(64), nullable=True)
    application_id = Column(Integer, nullable=True, index=True)
    event_data = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<AuditEvent(id={self.id}, type='{self.event_type}')>"
