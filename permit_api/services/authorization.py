# This project was developed with assistance from AI tools.
"""Pure authorization predicates for the application lifecycle.

Every function takes explicit actor/entity arguments and returns a
``Decision``; nothing here touches the database, HTTP, or the clock.
Checks are evaluated in a fixed order (ownership, status, identity,
completeness) so the first failing gate is the one reported.
"""

import enum
import logging
from dataclasses import dataclass

from permit_db import Application, Company, Document
from permit_db.enums import ApplicationStatus, ValidationStatus

from ..schemas.auth import Actor
from .completeness import CompletenessResult
from .errors import AuthorizationError

logger = logging.getLogger(__name__)


class DenialReason(str, enum.Enum):
    NOT_OWNER = "not_owner"
    WRONG_STATUS = "wrong_status"
    UNVERIFIED = "unverified"
    INCOMPLETE = "incomplete"
    ALREADY_VALIDATED = "already_validated"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenialReason | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def deny(reason: DenialReason) -> Decision:
    return Decision(allowed=False, reason=reason)


def _is_owner(actor: Actor, application: Application) -> bool:
    return actor.user_id == application.owner_user_id


def can_view(actor: Actor, application: Application) -> Decision:
    """Owner only, in every status."""
    if not _is_owner(actor, application):
        return deny(DenialReason.NOT_OWNER)
    return ALLOW


def can_mutate(actor: Actor, application: Application) -> Decision:
    """Owner, and only while the application is still a draft."""
    if not _is_owner(actor, application):
        return deny(DenialReason.NOT_OWNER)
    if application.status != ApplicationStatus.DRAFT:
        return deny(DenialReason.WRONG_STATUS)
    return ALLOW


def can_submit(
    actor: Actor, application: Application, completeness: CompletenessResult | None = None
) -> Decision:
    """Owner, draft, identity-verified, and complete.

    ``completeness`` is consulted last.
    Passing None evaluates only the ownership/status/identity gates, which
    lets the caller skip the requirement lookup when an earlier gate fails.
    """
    decision = can_mutate(actor, application)
    if not decision:
        return decision
    if not actor.identity_verified:
        return deny(DenialReason.UNVERIFIED)
    if completeness is not None and not completeness.is_complete:
        return deny(DenialReason.INCOMPLETE)
    return ALLOW


def can_cancel(actor: Actor, application: Application) -> Decision:
    return can_mutate(actor, application)


def can_upload_document(actor: Actor, application: Application) -> Decision:
    return can_mutate(actor, application)


def can_delete_document(actor: Actor, application: Application, document: Document) -> Decision:
    """Mutation rights plus the document must not be validated yet."""
    decision = can_mutate(actor, application)
    if not decision:
        return decision
    if document.validation_status == ValidationStatus.VALIDATED:
        return deny(DenialReason.ALREADY_VALIDATED)
    return ALLOW


def can_assign_company(actor: Actor, company: Company | None) -> Decision:
    """The referenced company must be owned by the actor.

    This is a field-level check on create/update, separate from
    application ownership.
    """
    if company is None or company.owner_user_id != actor.user_id:
        return deny(DenialReason.NOT_OWNER)
    return ALLOW


def ensure_allowed(
    decision: Decision, *, actor: Actor, action: str, application_id: int | None = None
) -> None:
    """Raise AuthorizationError for a denial, logging the reason."""
    if decision:
        return
    logger.warning(
        "Authorization denied: user=%s action=%s application=%s reason=%s",
        actor.user_id,
        action,
        application_id,
        decision.reason.value,
    )
    raise AuthorizationError(decision.reason.value)
