from threading import Lock
from typing import Any, Protocol
from urllib.parse import quote

from eye_disease_api.errors import StoreUnavailable

PUBLIC_URL_BASE = "https://storage.googleapis.com"


class BlobStore(Protocol):
    def save(self, key: str, data: bytes, content_type: str) -> str: ...


class FirebaseBlobStore:
    """Writes blobs to a Cloud Storage bucket obtained from firebase_admin."""

    def __init__(self, bucket: Any) -> None:
        self._bucket = bucket

    @property
    def bucket_name(self) -> str:
        return self._bucket.name

    def save(self, key: str, data: bytes, content_type: str) -> str:
        try:
            blob = self._bucket.blob(key)
            blob.upload_from_string(data, content_type=content_type)
        except Exception as exc:  # noqa: BLE001
            raise StoreUnavailable(f"blob upload of {key!r} failed: {exc}") from exc
        return public_url(self._bucket.name, blob.name)


class InMemoryBlobStore:
    def __init__(self, bucket_name: str = "local") -> None:
        self.bucket_name = bucket_name
        self._blobs: dict[str, tuple[bytes, str]] = {}
        self._lock = Lock()

    def save(self, key: str, data: bytes, content_type: str) -> str:
        with self._lock:
            self._blobs[key] = (bytes(data), content_type)
        return f"memory://{self.bucket_name}/{quote(key)}"

    def get(self, key: str) -> tuple[bytes, str] | None:
        with self._lock:
            return self._blobs.get(key)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._blobs)


def public_url(bucket_name: str, key: str) -> str:
    return f"{PUBLIC_URL_BASE}/{bucket_name}/{quote(key)}"
