import os
from dataclasses import dataclass

from dotenv import load_dotenv

ALLOWED_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg"})
DEFAULT_MAX_UPLOAD_BYTES = 1 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    storage_backend: str = "firebase"
    firebase_credentials: str = "firebase-admin-sdk.json"
    storage_bucket: str = "sightsafe-eye-detection.firebasestorage.app"
    predictions_collection: str = "predictions"
    upload_dir: str = "uploads"
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    prediction_service_url: str = ""
    prediction_timeout_seconds: float = 20.0
    log_level: str = "INFO"
    log_json: bool = True
    enable_metrics: bool = True


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        storage_backend=os.getenv("STORAGE_BACKEND", "firebase").lower(),
        firebase_credentials=os.getenv("FIREBASE_CREDENTIALS", "firebase-admin-sdk.json"),
        storage_bucket=normalize_bucket_name(
            os.getenv("STORAGE_BUCKET", "sightsafe-eye-detection.firebasestorage.app")
        ),
        predictions_collection=os.getenv("PREDICTIONS_COLLECTION", "predictions"),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
        prediction_service_url=os.getenv("PREDICTION_SERVICE_URL", ""),
        prediction_timeout_seconds=float(os.getenv("PREDICTION_TIMEOUT_SECONDS", "20")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "true").lower() == "true",
        enable_metrics=os.getenv("ENABLE_METRICS", "true").lower() == "true",
    )


def normalize_bucket_name(raw: str) -> str:
    # firebase_admin expects the bare bucket name, not a gs:// URI.
    name = raw.strip()
    if name.startswith("gs://"):
        name = name[len("gs://") :]
    return name.rstrip("/")
