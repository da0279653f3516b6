# This project was developed with assistance from AI tools.
"""In-memory stand-ins for the persistence, storage and event ports.

``InMemoryUnitOfWork`` stages inserts and deletes until ``commit()`` so
tests can observe that nothing leaks from a failed operation.
"""

from datetime import UTC, datetime
from itertools import count

from permit_api.services.repository import ApplicationFilters
from permit_api.services.storage import StorageService


class InMemoryStore:
    """Committed state shared by every unit of work of one test."""

    def __init__(self):
        self.applications: dict = {}
        self.documents: dict = {}
        self.companies: dict = {}
        self.users: dict = {}
        self._ids = count(1000)

    def next_id(self) -> int:
        return next(self._ids)

    def seed(self, *objects):
        for obj in objects:
            table = {
                "Application": self.applications,
                "Document": self.documents,
                "Company": self.companies,
                "User": self.users,
            }[type(obj).__name__]
            table[obj.id] = obj
        return self

    def slot(self, application_id: int, requirement_id: int) -> list:
        return [
            d
            for d in self.documents.values()
            if d.application_id == application_id and d.requirement_id == requirement_id
        ]


class _ApplicationRepo:
    def __init__(self, uow):
        self._uow = uow

    async def get(self, application_id):
        store = self._uow.store
        application = store.applications.get(application_id)
        if application is None:
            return None
        application.documents = sorted(
            (d for d in store.documents.values() if d.application_id == application_id),
            key=lambda d: d.requirement_id,
        )
        application.company = store.companies.get(application.company_id)
        return application

    async def list_for_owner(self, owner_user_id, filters: ApplicationFilters, *, offset, limit):
        rows = [a for a in self._uow.store.applications.values() if a.owner_user_id == owner_user_id]
        if filters.status is not None:
            rows = [a for a in rows if a.status == filters.status]
        if filters.license_type_id is not None:
            rows = [a for a in rows if a.license_type_id == filters.license_type_id]
        if filters.submitted_from is not None:
            rows = [a for a in rows if a.submitted_at and a.submitted_at >= filters.submitted_from]
        if filters.submitted_to is not None:
            rows = [a for a in rows if a.submitted_at and a.submitted_at <= filters.submitted_to]
        rows.sort(key=lambda a: (a.created_at, a.id), reverse=True)
        return rows[offset : offset + limit], len(rows)

    async def add(self, application):
        self._uow.stage_add("applications", application)
        return application


class _DocumentRepo:
    def __init__(self, uow):
        self._uow = uow

    async def get(self, document_id):
        return self._uow.store.documents.get(document_id)

    async def list_for_application(self, application_id):
        return sorted(
            (d for d in self._uow.store.documents.values() if d.application_id == application_id),
            key=lambda d: d.requirement_id,
        )

    async def get_for_slot(self, application_id, requirement_id):
        found = self._uow.store.slot(application_id, requirement_id)
        return found[0] if found else None

    async def add(self, document):
        self._uow.stage_add("documents", document)
        return document

    async def delete(self, document):
        self._uow.stage_delete("documents", document)


class _LookupRepo:
    def __init__(self, table: dict):
        self._table = table

    async def get(self, key):
        return self._table.get(key)


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryStore | None = None, *, commit_error: Exception | None = None):
        self.store = store or InMemoryStore()
        self.commit_error = commit_error
        self.commits = 0
        self.rollbacks = 0
        self._pending: list[tuple[str, str, object]] = []
        self.applications = _ApplicationRepo(self)
        self.documents = _DocumentRepo(self)
        self.companies = _LookupRepo(self.store.companies)

    def stage_add(self, table: str, obj) -> None:
        if obj.id is None:
            obj.id = self.store.next_id()
        # Column defaults normally applied on flush
        now = datetime.now(UTC)
        for column in ("created_at", "updated_at"):
            if hasattr(obj, column) and getattr(obj, column) is None:
                setattr(obj, column, now)
        self._pending.append(("add", table, obj))

    def stage_delete(self, table: str, obj) -> None:
        self._pending.append(("delete", table, obj))

    async def commit(self) -> None:
        if self.commit_error is not None:
            raise self.commit_error
        for op, table, obj in self._pending:
            rows = getattr(self.store, table)
            if op == "add":
                rows[obj.id] = obj
            else:
                rows.pop(obj.id, None)
        self._pending.clear()
        self.commits += 1

    async def rollback(self) -> None:
        self._pending.clear()
        self.rollbacks += 1


class FakeStorage:
    """Blob store in a dict, with switchable failures."""

    build_object_key = staticmethod(StorageService.build_object_key)

    def __init__(self, *, fail_upload: bool = False, fail_delete: bool = False):
        self.blobs: dict[str, bytes] = {}
        self.fail_upload = fail_upload
        self.fail_delete = fail_delete

    async def upload_file(self, file_data: bytes, object_key: str, content_type: str) -> str:
        if self.fail_upload:
            raise ConnectionError("storage unavailable")
        self.blobs[object_key] = file_data
        return object_key

    async def download_file(self, object_key: str) -> bytes:
        return self.blobs[object_key]

    async def delete_file(self, object_key: str) -> None:
        if self.fail_delete:
            raise ConnectionError("storage unavailable")
        self.blobs.pop(object_key, None)


class RecordingSink:
    def __init__(self):
        self.events = []

    def emit(self, event) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e.event_type.value for e in self.events]
