# This project was developed with assistance from AI tools.
"""Tests for the pure authorization predicates."""

import pytest

from permit_api.services.authorization import (
    DenialReason,
    can_assign_company,
    can_cancel,
    can_delete_document,
    can_mutate,
    can_submit,
    can_upload_document,
    can_view,
    ensure_allowed,
)
from permit_api.services.completeness import CompletenessResult
from permit_api.services.errors import AuthorizationError
from permit_db.enums import ApplicationStatus

from .builders import STRANGER, make_actor, make_application, make_company, make_document

_COMPLETE = CompletenessResult(is_complete=True)
_INCOMPLETE = CompletenessResult(is_complete=False, missing_requirement_ids=[2])


@pytest.mark.parametrize(
    "predicate",
    [can_view, can_mutate, can_cancel, can_upload_document, can_submit],
)
def test_non_owner_denied_for_every_action(predicate):
    decision = predicate(make_actor(STRANGER), make_application())
    assert not decision
    assert decision.reason == DenialReason.NOT_OWNER


def test_non_owner_cannot_delete_document():
    decision = can_delete_document(make_actor(STRANGER), make_application(), make_document())
    assert decision.reason == DenialReason.NOT_OWNER


@pytest.mark.parametrize("status", [ApplicationStatus.SUBMITTED, ApplicationStatus.CANCELLED])
def test_owner_can_view_in_any_status(status):
    assert can_view(make_actor(), make_application(status=status))


@pytest.mark.parametrize("status", [ApplicationStatus.SUBMITTED, ApplicationStatus.CANCELLED])
@pytest.mark.parametrize("predicate", [can_mutate, can_cancel, can_upload_document, can_submit])
def test_owner_cannot_mutate_after_draft(predicate, status):
    decision = predicate(make_actor(), make_application(status=status))
    assert decision.reason == DenialReason.WRONG_STATUS


def test_submit_requires_verified_identity():
    decision = can_submit(make_actor(verified=False), make_application(), _COMPLETE)
    assert decision.reason == DenialReason.UNVERIFIED


def test_submit_requires_completeness():
    decision = can_submit(make_actor(), make_application(), _INCOMPLETE)
    assert decision.reason == DenialReason.INCOMPLETE


def test_submit_allowed_when_all_gates_pass():
    assert can_submit(make_actor(), make_application(), _COMPLETE)


def test_submit_without_completeness_checks_earlier_gates_only():
    assert can_submit(make_actor(), make_application())


def test_gate_order_reports_ownership_first():
    """A stranger on a submitted app with no verification is reported as not_owner."""
    app = make_application(status=ApplicationStatus.SUBMITTED)
    decision = can_submit(make_actor(STRANGER, verified=False), app, _INCOMPLETE)
    assert decision.reason == DenialReason.NOT_OWNER


def test_status_reported_before_identity():
    app = make_application(status=ApplicationStatus.CANCELLED)
    decision = can_submit(make_actor(verified=False), app, _INCOMPLETE)
    assert decision.reason == DenialReason.WRONG_STATUS


def test_validated_document_cannot_be_deleted_on_draft():
    decision = can_delete_document(
        make_actor(), make_application(), make_document(validated=True)
    )
    assert decision.reason == DenialReason.ALREADY_VALIDATED


def test_unvalidated_document_can_be_deleted():
    assert can_delete_document(make_actor(), make_application(), make_document())


def test_company_must_belong_to_actor():
    assert can_assign_company(make_actor(), make_company())
    assert not can_assign_company(make_actor(), make_company(owner_user_id=STRANGER))
    assert not can_assign_company(make_actor(), None)


def test_ensure_allowed_raises_with_reason():
    decision = can_view(make_actor(STRANGER), make_application())
    with pytest.raises(AuthorizationError) as exc_info:
        ensure_allowed(decision, actor=make_actor(STRANGER), action="view", application_id=1)
    assert exc_info.value.reason == "not_owner"
    assert exc_info.value.status_code == 403


def test_ensure_allowed_passes_allow():
    ensure_allowed(can_view(make_actor(), make_application()), actor=make_actor(), action="view")
