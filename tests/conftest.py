# This project was developed with assistance from AI tools.
"""Shared fixtures: an in-memory world seeded with one owner and company."""

import pytest

from permit_api.services.application import ApplicationLifecycle

from .builders import OWNER, STRANGER, make_company, make_policy, make_registry, make_user
from .fakes import FakeStorage, InMemoryStore, InMemoryUnitOfWork, RecordingSink


@pytest.fixture
def store():
    return InMemoryStore().seed(
        make_user(OWNER),
        make_user(STRANGER),
        make_company(10, owner_user_id=OWNER),
        make_company(20, owner_user_id=STRANGER),
    )


@pytest.fixture
def uow(store):
    return InMemoryUnitOfWork(store)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def registry():
    return make_registry()


@pytest.fixture
def lifecycle(uow, registry, storage, sink):
    return ApplicationLifecycle(uow, registry, storage, sink, make_policy())
