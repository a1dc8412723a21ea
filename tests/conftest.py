import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Keep tests offline: no Firebase credentials, no remote inference service.
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["UPLOAD_DIR"] = str(Path(tempfile.gettempdir()) / "eye_disease_test_uploads")
os.environ["PREDICTION_SERVICE_URL"] = ""
os.environ["LOG_JSON"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from eye_disease_api.config import Settings  # noqa: E402
from eye_disease_api.main import create_app  # noqa: E402
from eye_disease_api.prediction import MockPredictor  # noqa: E402
from eye_disease_api.services.prediction_service import PredictionPipeline  # noqa: E402
from eye_disease_api.storage.blob import InMemoryBlobStore  # noqa: E402
from eye_disease_api.storage.records import InMemoryRecordStore  # noqa: E402

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        storage_backend="memory",
        storage_bucket="test-bucket",
        upload_dir=str(tmp_path / "uploads"),
        log_json=False,
    )


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore("test-bucket")


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def pipeline(settings: Settings, blob_store, record_store) -> PredictionPipeline:
    return PredictionPipeline(
        blob_store=blob_store,
        record_store=record_store,
        predictor=MockPredictor(),
        upload_dir=Path(settings.upload_dir),
        max_upload_bytes=settings.max_upload_bytes,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def client(settings: Settings, pipeline: PredictionPipeline) -> TestClient:
    return TestClient(create_app(settings, pipeline))


@pytest.fixture
def staged_files(settings: Settings):
    def _list() -> list[Path]:
        upload_dir = Path(settings.upload_dir)
        if not upload_dir.exists():
            return []
        return list(upload_dir.iterdir())

    return _list
