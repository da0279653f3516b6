# This project was developed with assistance from AI tools.
"""Tests for settings defaults and the collaborator ports they feed."""

from typing import get_type_hints

from permit_api.core.config import Settings
from permit_api.services.application import ApplicationLifecycle
from permit_api.services.document import DocumentPolicy, DocumentSlotManager
from permit_api.services.repository import UnitOfWork
from permit_api.services.requirements import RequirementRegistry
from permit_api.services.storage import BlobStorage


def test_upload_policy_defaults():
    policy = DocumentPolicy.from_settings(Settings(_env_file=None))

    assert policy.allowed_extensions == {"pdf", "jpg", "jpeg", "png"}
    assert policy.allowed_content_types == {"application/pdf", "image/jpeg", "image/png"}
    assert policy.max_size == 10 * 1024 * 1024
    assert policy.integrity_hash is False


def test_settings_expose_no_unused_debug_flag():
    assert "DEBUG" not in Settings.model_fields


def test_engine_collaborators_are_typed_against_ports():
    for cls in (ApplicationLifecycle, DocumentSlotManager):
        hints = get_type_hints(cls.__init__)
        assert hints["uow"] is UnitOfWork
        assert hints["registry"] is RequirementRegistry
        assert hints["storage"] is BlobStorage


def test_unit_of_work_covers_only_lifecycle_repositories():
    assert set(get_type_hints(UnitOfWork)) == {"applications", "documents", "companies"}
