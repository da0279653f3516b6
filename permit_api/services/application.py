# This project was developed with assistance from AI tools.
"""Application lifecycle engine.

Orchestrates create, update, submit and cancel of permit applications,
plus document slot operations, on top of the pure guard and completeness
functions. Collaborators (unit of work, requirement registry, blob
storage, event sink) are passed in, so the engine never reaches for
globals.

Events are emitted only after the unit of work commits; a failed
operation emits nothing.
"""

import logging
from datetime import UTC, datetime

from permit_db import Application, Document
from permit_db.enums import ApplicationStatus

from ..schemas.application import ApplicationCreate, ApplicationUpdate
from ..schemas.auth import Actor
from .authorization import (
    can_assign_company,
    can_cancel,
    can_mutate,
    can_submit,
    can_view,
    ensure_allowed,
)
from .completeness import CompletenessResult, check_completeness, validate_operational_details
from .document import DocumentPolicy, DocumentSlotManager, UploadedFile
from .errors import BusinessRuleViolation, CompletenessError, NotFoundError, ValidationError
from .events import DomainEvent, EventSink, EventType
from .repository import ApplicationFilters, UnitOfWork
from .requirements import RequirementRegistry
from .storage import BlobStorage

logger = logging.getLogger(__name__)


class InvalidTransitionError(BusinessRuleViolation):
    """Raised when an application status transition is not allowed."""

    error_code = "invalid_transition"


_TRANSITIONS = ApplicationStatus.valid_transitions()


class ApplicationLifecycle:
    def __init__(
        self,
        uow: UnitOfWork,
        registry: RequirementRegistry,
        storage: BlobStorage,
        events: EventSink,
        policy: DocumentPolicy,
    ):
        self._uow = uow
        self._registry = registry
        self._events = events
        self.documents = DocumentSlotManager(uow, storage, registry, events, policy)

    # -- Queries -------------------------------------------------------------

    async def view(self, actor: Actor, application_id: int) -> Application:
        """Return the application with documents and company loaded."""
        application = await self._load(application_id)
        ensure_allowed(
            can_view(actor, application),
            actor=actor,
            action="view",
            application_id=application_id,
        )
        return application

    async def list_for_owner(
        self,
        actor: Actor,
        filters: ApplicationFilters | None = None,
        *,
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[list[Application], int]:
        """Return one page of the actor's applications, newest first, and the total."""
        page = max(page, 1)
        return await self._uow.applications.list_for_owner(
            actor.user_id,
            filters or ApplicationFilters(),
            offset=(page - 1) * per_page,
            limit=per_page,
        )

    async def completeness(self, actor: Actor, application_id: int) -> CompletenessResult:
        application = await self.view(actor, application_id)
        return await self._evaluate(application)

    # -- Commands ------------------------------------------------------------

    async def create(self, actor: Actor, data: ApplicationCreate) -> Application:
        """Create a draft owned by ``actor``.

        Every field problem is collected and raised together as one
        ValidationError.
        """
        errors: dict[str, str] = {}
        if data.company_id is None:
            errors["company_id"] = "Company is required."
        else:
            errors.update(await self._check_company(actor, data.company_id))
        if data.license_type_id is None:
            errors["license_type_id"] = "License type is required."
        elif not await self._registry.license_type_exists(data.license_type_id):
            errors["license_type_id"] = "The selected license type does not exist."
        errors.update(validate_operational_details(data.operational_details))
        if errors:
            raise ValidationError(errors)

        application = Application(
            owner_user_id=actor.user_id,
            company_id=data.company_id,
            license_type_id=data.license_type_id,
            status=ApplicationStatus.DRAFT,
            operational_details=data.operational_details.model_dump(),
            submitted_at=None,
        )
        await self._uow.applications.add(application)
        await self._uow.commit()

        logger.info(
            "Application %s created by %s (license_type=%s)",
            application.id,
            actor.user_id,
            application.license_type_id,
        )
        self._emit(
            EventType.APPLICATION_CREATED,
            actor,
            application,
            {"company_id": application.company_id, "license_type_id": application.license_type_id},
        )
        return await self._load(application.id)

    async def update(
        self, actor: Actor, application_id: int, data: ApplicationUpdate
    ) -> Application:
        """Replace license type and operational details of a draft.

        ``company_id`` is optional and keeps the current company when omitted.
        The catalog is only consulted when the license type changes.
        """
        application = await self._load(application_id)
        ensure_allowed(
            can_mutate(actor, application),
            actor=actor,
            action="update",
            application_id=application_id,
        )

        errors: dict[str, str] = {}
        if data.company_id is not None and data.company_id != application.company_id:
            errors.update(await self._check_company(actor, data.company_id))
        if data.license_type_id is None:
            errors["license_type_id"] = "License type is required."
        elif data.license_type_id != application.license_type_id and not (
            await self._registry.license_type_exists(data.license_type_id)
        ):
            errors["license_type_id"] = "The selected license type does not exist."
        errors.update(validate_operational_details(data.operational_details))
        if errors:
            raise ValidationError(errors)

        previous = {
            "company_id": application.company_id,
            "license_type_id": application.license_type_id,
        }
        if data.company_id is not None:
            application.company_id = data.company_id
        application.license_type_id = data.license_type_id
        application.operational_details = data.operational_details.model_dump()
        await self._uow.commit()

        logger.info("Application %s updated by %s", application_id, actor.user_id)
        self._emit(
            EventType.APPLICATION_UPDATED,
            actor,
            application,
            {
                "previous": previous,
                "company_id": application.company_id,
                "license_type_id": application.license_type_id,
            },
        )
        return await self._load(application_id)

    async def submit(self, actor: Actor, application_id: int) -> Application:
        """Move a complete draft to submitted.

        Ownership, status and identity are checked before the catalog is
        consulted; an incomplete application raises CompletenessError with
        every missing requirement id and structural gap.
        """
        application = await self._load(application_id)
        ensure_allowed(
            can_submit(actor, application),
            actor=actor,
            action="submit",
            application_id=application_id,
        )

        result = await self._evaluate(application)
        if not can_submit(actor, application, result):
            logger.info(
                "Submit refused for application %s: missing=%s structural=%s",
                application_id,
                result.missing_requirement_ids,
                sorted(result.structural_errors),
            )
            raise CompletenessError(result.missing_requirement_ids, result.structural_errors)

        _transition(application, ApplicationStatus.SUBMITTED)
        application.submitted_at = datetime.now(UTC)
        await self._uow.commit()

        logger.info("Application %s submitted by %s", application_id, actor.user_id)
        self._emit(
            EventType.APPLICATION_SUBMITTED,
            actor,
            application,
            {
                "submitted_at": application.submitted_at.isoformat(),
                "company_id": application.company_id,
                "license_type_id": application.license_type_id,
                "operational_details": application.operational_details,
                "document_ids": [doc.id for doc in application.documents],
            },
        )
        return await self._load(application_id)

    async def cancel(
        self, actor: Actor, application_id: int, reason: str | None = None
    ) -> Application:
        application = await self._load(application_id)
        ensure_allowed(
            can_cancel(actor, application),
            actor=actor,
            action="cancel",
            application_id=application_id,
        )

        _transition(application, ApplicationStatus.CANCELLED)
        await self._uow.commit()

        logger.info("Application %s cancelled by %s", application_id, actor.user_id)
        self._emit(EventType.APPLICATION_CANCELLED, actor, application, {"reason": reason})
        return await self._load(application_id)

    # -- Documents -----------------------------------------------------------

    async def upload_document(
        self, actor: Actor, application_id: int, requirement_id: int, file: UploadedFile
    ) -> Document:
        application = await self._load(application_id)
        return await self.documents.upload(actor, application, requirement_id, file)

    async def delete_document(self, actor: Actor, application_id: int, document_id: int) -> None:
        application = await self._load(application_id)
        # Ownership and status are checked before the document id is resolved
        ensure_allowed(
            can_mutate(actor, application),
            actor=actor,
            action="delete_document",
            application_id=application_id,
        )
        document = await self._load_document(document_id)
        await self.documents.delete(actor, application, document)

    async def download_document(
        self, actor: Actor, application_id: int, document_id: int
    ) -> tuple[Document, bytes]:
        application = await self._load(application_id)
        ensure_allowed(
            can_view(actor, application),
            actor=actor,
            action="download_document",
            application_id=application_id,
        )
        document = await self._load_document(document_id)
        data = await self.documents.download(actor, application, document)
        return document, data

    # -- Helpers -------------------------------------------------------------

    async def _load(self, application_id: int) -> Application:
        application = await self._uow.applications.get(application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    async def _load_document(self, document_id: int) -> Document:
        document = await self._uow.documents.get(document_id)
        if document is None:
            raise NotFoundError("Document not found")
        return document

    async def _check_company(self, actor: Actor, company_id: int) -> dict[str, str]:
        company = await self._uow.companies.get(company_id)
        if company is None:
            return {"company_id": "The selected company does not exist."}
        if not can_assign_company(actor, company):
            logger.warning(
                "User %s referenced company %s they do not own", actor.user_id, company_id
            )
            return {"company_id": "The selected company does not belong to you."}
        return {}

    async def _evaluate(self, application: Application) -> CompletenessResult:
        requirements = await self._registry.get_requirements(application.license_type_id)
        documents = await self._uow.documents.list_for_application(application.id)
        return check_completeness(application, requirements, documents)

    def _emit(
        self,
        event_type: EventType,
        actor: Actor,
        application: Application,
        metadata: dict,
    ) -> None:
        self._events.emit(
            DomainEvent(
                event_type=event_type,
                actor_id=actor.user_id,
                entity_type="application",
                entity_id=application.id,
                application_id=application.id,
                metadata=metadata,
            )
        )


def _transition(application: Application, target: ApplicationStatus) -> None:
    """Set ``application.status`` to ``target`` if the transition is legal."""
    current = ApplicationStatus(application.status)
    if target not in _TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(
            f"Cannot transition from '{current.value}' to '{target.value}'"
        )
    application.status = target
