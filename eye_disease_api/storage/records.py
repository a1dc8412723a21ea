from threading import Lock
from typing import Any, Protocol
from uuid import uuid4

from eye_disease_api.errors import RecordUnavailable


class RecordStore(Protocol):
    def create(self, document: dict) -> str: ...


class FirestoreRecordStore:
    """Write-once documents in a Firestore collection; ids come from Firestore."""

    def __init__(self, client: Any, collection: str = "predictions") -> None:
        self._client = client
        self._collection = collection

    def create(self, document: dict) -> str:
        try:
            ref = self._client.collection(self._collection).document()
            ref.set(document)
        except Exception as exc:  # noqa: BLE001
            raise RecordUnavailable(f"write to collection {self._collection!r} failed: {exc}") from exc
        return ref.id


class InMemoryRecordStore:
    def __init__(self) -> None:
        self._documents: dict[str, dict] = {}
        self._lock = Lock()

    def create(self, document: dict) -> str:
        record_id = uuid4().hex
        with self._lock:
            self._documents[record_id] = dict(document)
        return record_id

    def get(self, record_id: str) -> dict | None:
        with self._lock:
            document = self._documents.get(record_id)
        return dict(document) if document is not None else None

    def count(self) -> int:
        with self._lock:
            return len(self._documents)
