from eye_disease_api.config import Settings
from eye_disease_api.storage.blob import BlobStore, FirebaseBlobStore, InMemoryBlobStore
from eye_disease_api.storage.firebase import init_firebase_app, open_bucket, open_firestore
from eye_disease_api.storage.records import FirestoreRecordStore, InMemoryRecordStore, RecordStore

SUPPORTED_BACKENDS = {"firebase", "memory"}


def build_stores(settings: Settings) -> tuple[BlobStore, RecordStore]:
    if settings.storage_backend == "memory":
        return InMemoryBlobStore(settings.storage_bucket), InMemoryRecordStore()
    if settings.storage_backend == "firebase":
        app = init_firebase_app(settings)
        return (
            FirebaseBlobStore(open_bucket(app)),
            FirestoreRecordStore(open_firestore(app), settings.predictions_collection),
        )
    raise ValueError(
        f"Unsupported STORAGE_BACKEND {settings.storage_backend!r}; expected one of {sorted(SUPPORTED_BACKENDS)}"
    )
