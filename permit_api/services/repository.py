# This project was developed with assistance from AI tools.
"""Persistence ports for the lifecycle engine and their SQLAlchemy adapters.

The lifecycle depends only on the protocols below. ``UnitOfWork`` groups
the repositories sharing one transaction; nothing a repository does is
durable until ``commit()``. ``UserRepository`` sits outside the unit of
work; only actor resolution in the auth middleware reads users.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from permit_db import Application, Company, Document, User
from permit_db.enums import ApplicationStatus
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload


@dataclass(frozen=True)
class ApplicationFilters:
    """Optional list filters. Date bounds apply to ``submitted_at``."""

    status: ApplicationStatus | None = None
    license_type_id: int | None = None
    submitted_from: datetime | None = None
    submitted_to: datetime | None = None


class ApplicationRepository(Protocol):
    async def get(self, application_id: int) -> Application | None: ...

    async def list_for_owner(
        self,
        owner_user_id: str,
        filters: ApplicationFilters,
        *,
        offset: int,
        limit: int,
    ) -> tuple[list[Application], int]: ...

    async def add(self, application: Application) -> Application: ...


class DocumentRepository(Protocol):
    async def get(self, document_id: int) -> Document | None: ...

    async def list_for_application(self, application_id: int) -> list[Document]: ...

    async def get_for_slot(self, application_id: int, requirement_id: int) -> Document | None: ...

    async def add(self, document: Document) -> Document: ...

    async def delete(self, document: Document) -> None: ...


class CompanyRepository(Protocol):
    async def get(self, company_id: int) -> Company | None: ...


class UserRepository(Protocol):
    async def get(self, user_id: str) -> User | None: ...


class UnitOfWork(Protocol):
    applications: ApplicationRepository
    documents: DocumentRepository
    companies: CompanyRepository

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


# ---------------------------------------------------------------------------
# SQLAlchemy adapters
# ---------------------------------------------------------------------------


class SqlAlchemyApplicationRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, application_id: int) -> Application | None:
        """Load an application with documents and company eagerly.

        ``populate_existing`` refreshes an instance already in the identity
        map so collections reflect rows added or removed earlier in the
        request.
        """
        stmt = (
            select(Application)
            .options(selectinload(Application.documents), selectinload(Application.company))
            .where(Application.id == application_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_owner(
        self,
        owner_user_id: str,
        filters: ApplicationFilters,
        *,
        offset: int,
        limit: int,
    ) -> tuple[list[Application], int]:
        count_stmt = select(func.count(Application.id)).where(
            Application.owner_user_id == owner_user_id
        )
        count_stmt = _apply_filters(count_stmt, filters)
        total = (await self._session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(Application)
            .where(Application.owner_user_id == owner_user_id)
            .order_by(Application.created_at.desc(), Application.id.desc())
            .offset(offset)
            .limit(limit)
        )
        stmt = _apply_filters(stmt, filters)
        result = await self._session.execute(stmt)
        return list(result.scalars().all()), total

    async def add(self, application: Application) -> Application:
        self._session.add(application)
        await self._session.flush()  # Assign application.id
        return application


def _apply_filters(stmt, filters: ApplicationFilters):
    """Apply optional WHERE clauses for the list filters."""
    if filters.status is not None:
        stmt = stmt.where(Application.status == filters.status)
    if filters.license_type_id is not None:
        stmt = stmt.where(Application.license_type_id == filters.license_type_id)
    if filters.submitted_from is not None:
        stmt = stmt.where(Application.submitted_at >= filters.submitted_from)
    if filters.submitted_to is not None:
        stmt = stmt.where(Application.submitted_at <= filters.submitted_to)
    return stmt


class SqlAlchemyDocumentRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, document_id: int) -> Document | None:
        return await self._session.get(Document, document_id)

    async def list_for_application(self, application_id: int) -> list[Document]:
        stmt = (
            select(Document)
            .where(Document.application_id == application_id)
            .order_by(Document.requirement_id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_slot(self, application_id: int, requirement_id: int) -> Document | None:
        stmt = select(Document).where(
            Document.application_id == application_id,
            Document.requirement_id == requirement_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, document: Document) -> Document:
        self._session.add(document)
        await self._session.flush()  # Assign document.id
        return document

    async def delete(self, document: Document) -> None:
        # Flush now: the unit of work emits INSERTs before DELETEs, and a
        # replacement row for the same slot would trip uq_document_slot.
        await self._session.delete(document)
        await self._session.flush()


class SqlAlchemyCompanyRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, company_id: int) -> Company | None:
        return await self._session.get(Company, company_id)


class SqlAlchemyUserRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)


class SqlAlchemyUnitOfWork:
    """The lifecycle repositories over one AsyncSession; commit/rollback delegate to it."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self.applications = SqlAlchemyApplicationRepository(session)
        self.documents = SqlAlchemyDocumentRepository(session)
        self.companies = SqlAlchemyCompanyRepository(session)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
