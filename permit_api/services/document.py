# This project was developed with assistance from AI tools.
"""Document slot management.

Each (application, requirement) pair holds at most one document. Uploading
into an occupied slot replaces the previous document: the new blob is
written under a fresh key first, then the old row is swapped for the new one
in a single commit. Until that commit succeeds the old document stays the
visible one.
"""

import hashlib
import logging
import mimetypes
import os
from dataclasses import dataclass

from permit_db import Application, Document
from permit_db.enums import ValidationStatus

from ..core.config import Settings
from ..schemas.auth import Actor
from .authorization import (
    DenialReason,
    can_delete_document,
    can_mutate,
    can_upload_document,
    can_view,
    ensure_allowed,
)
from .errors import BusinessRuleViolation, NotFoundError, ValidationError
from .events import DomainEvent, EventSink, EventType
from .repository import UnitOfWork
from .requirements import RequirementRegistry
from .storage import BlobStorage

logger = logging.getLogger(__name__)

_GENERIC_CONTENT_TYPES = frozenset({"", "application/octet-stream"})


@dataclass(frozen=True)
class UploadedFile:
    """File payload as received from the client."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lstrip(".").lower()


@dataclass(frozen=True)
class DocumentPolicy:
    """Accepted file types, size ceiling and whether to store a digest."""

    allowed_extensions: frozenset[str]
    allowed_content_types: frozenset[str]
    max_size: int
    integrity_hash: bool = False

    @classmethod
    def from_settings(cls, cfg: Settings) -> "DocumentPolicy":
        return cls(
            allowed_extensions=frozenset(e.lower() for e in cfg.ALLOWED_EXTENSIONS),
            allowed_content_types=frozenset(cfg.ALLOWED_CONTENT_TYPES),
            max_size=cfg.MAX_UPLOAD_SIZE,
            integrity_hash=cfg.FILE_INTEGRITY_HASH_ENABLED,
        )

    def check(self, file: UploadedFile) -> dict[str, str]:
        """Return a field -> message map of policy violations.

        A missing or generic content type falls back to the extension check.
        """
        errors: dict[str, str] = {}
        if file.extension not in self.allowed_extensions or not (
            file.content_type in self.allowed_content_types
            or file.content_type in _GENERIC_CONTENT_TYPES
        ):
            errors["file"] = (
                f"Unsupported file type. Allowed: {', '.join(sorted(self.allowed_extensions))}."
            )
        elif file.size == 0:
            errors["file"] = "The uploaded file is empty."
        elif file.size > self.max_size:
            errors["file"] = (
                f"File size {file.size} exceeds maximum of {self.max_size} bytes."
            )
        return errors

    def media_type(self, file: UploadedFile) -> str:
        """Content type to store, guessed from the filename when the client sent none."""
        if file.content_type in _GENERIC_CONTENT_TYPES:
            return mimetypes.guess_type(file.filename)[0] or "application/octet-stream"
        return file.content_type


class DocumentSlotManager:
    """Upload, replace, delete and fetch the documents of an application."""

    def __init__(
        self,
        uow: UnitOfWork,
        storage: BlobStorage,
        registry: RequirementRegistry,
        events: EventSink,
        policy: DocumentPolicy,
    ):
        self._uow = uow
        self._storage = storage
        self._registry = registry
        self._events = events
        self._policy = policy

    async def upload(
        self,
        actor: Actor,
        application: Application,
        requirement_id: int,
        file: UploadedFile,
    ) -> Document:
        """Store ``file`` in the slot for ``requirement_id``, replacing any occupant.

        Policy and requirement checks run before any storage write. A storage
        failure leaves the previous document untouched; a failed commit
        removes the freshly written blob.
        """
        ensure_allowed(
            can_upload_document(actor, application),
            actor=actor,
            action="upload_document",
            application_id=application.id,
        )

        errors = self._policy.check(file)
        requirements = await self._registry.get_requirements(application.license_type_id)
        if requirement_id not in {r.id for r in requirements}:
            errors["requirement_id"] = (
                "The selected document requirement does not belong to this license type."
            )
        if errors:
            raise ValidationError(errors)

        existing = await self._uow.documents.get_for_slot(application.id, requirement_id)

        media_type = self._policy.media_type(file)
        object_key = self._storage.build_object_key(application.id, file.filename)
        await self._storage.upload_file(file.data, object_key, media_type)

        document = Document(
            application_id=application.id,
            requirement_id=requirement_id,
            filename=os.path.basename(file.filename),
            mime_type=media_type,
            size_bytes=file.size,
            storage_key=object_key,
            content_hash=(
                hashlib.sha256(file.data).hexdigest() if self._policy.integrity_hash else None
            ),
            validation_status=ValidationStatus.UNVALIDATED,
            uploaded_by_user_id=actor.user_id,
        )
        try:
            if existing is not None:
                await self._uow.documents.delete(existing)
            await self._uow.documents.add(document)
            await self._uow.commit()
        except Exception:
            await self._uow.rollback()
            await self._discard_blob(object_key)
            raise

        replaced_id = None
        if existing is not None:
            replaced_id = existing.id
            await self._discard_blob(existing.storage_key)

        logger.info(
            "Document %s uploaded for application %s requirement %s (replaced=%s)",
            document.id,
            application.id,
            requirement_id,
            replaced_id,
        )
        self._events.emit(
            DomainEvent(
                event_type=EventType.DOCUMENT_UPLOADED,
                actor_id=actor.user_id,
                entity_type="document",
                entity_id=document.id,
                application_id=application.id,
                metadata={
                    "requirement_id": requirement_id,
                    "filename": document.filename,
                    "size_bytes": document.size_bytes,
                    "replaced_document_id": replaced_id,
                },
            )
        )
        return document

    async def delete(self, actor: Actor, application: Application, document: Document) -> None:
        """Remove a document row and its blob.

        Validated documents are frozen: deleting one is a conflict, not an
        authorization failure.
        """
        ensure_allowed(
            can_mutate(actor, application),
            actor=actor,
            action="delete_document",
            application_id=application.id,
        )
        _ensure_attached(application, document)

        decision = can_delete_document(actor, application, document)
        if decision.reason == DenialReason.ALREADY_VALIDATED:
            logger.warning(
                "Delete refused: document %s of application %s is validated",
                document.id,
                application.id,
            )
            raise BusinessRuleViolation(
                "Validated documents cannot be deleted.", error_code="already_validated"
            )
        ensure_allowed(
            decision, actor=actor, action="delete_document", application_id=application.id
        )

        document_id = document.id
        await self._uow.documents.delete(document)
        await self._uow.commit()
        await self._discard_blob(document.storage_key)

        logger.info("Document %s deleted from application %s", document_id, application.id)
        self._events.emit(
            DomainEvent(
                event_type=EventType.DOCUMENT_DELETED,
                actor_id=actor.user_id,
                entity_type="document",
                entity_id=document_id,
                application_id=application.id,
                metadata={
                    "requirement_id": document.requirement_id,
                    "filename": document.filename,
                },
            )
        )

    async def download(self, actor: Actor, application: Application, document: Document) -> bytes:
        ensure_allowed(
            can_view(actor, application),
            actor=actor,
            action="download_document",
            application_id=application.id,
        )
        _ensure_attached(application, document)
        return await self._storage.download_file(document.storage_key)

    async def _discard_blob(self, object_key: str) -> None:
        """Best-effort blob removal; a failure leaves an orphan for cleanup."""
        try:
            await self._storage.delete_file(object_key)
        except Exception:
            logger.warning("Could not delete blob %s; left orphaned", object_key, exc_info=True)


def _ensure_attached(application: Application, document: Document) -> None:
    if document.application_id != application.id:
        raise NotFoundError("Document not found for this application")
