import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from eye_disease_api.config import Settings
from eye_disease_api.errors import PredictionError
from eye_disease_api.prediction import Predictor, build_predictor
from eye_disease_api.schemas import ErrorResponse, PredictionRecord, PredictResponse
from eye_disease_api.storage.backends import build_stores
from eye_disease_api.storage.blob import BlobStore
from eye_disease_api.storage.records import RecordStore
from eye_disease_api.upload import stage_upload

SUCCESS_MESSAGE = "Model is predicted successfully."

logger = logging.getLogger("eye_disease.predict")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class PredictionPipeline:
    blob_store: BlobStore
    record_store: RecordStore
    predictor: Predictor
    upload_dir: Path
    max_upload_bytes: int
    clock: Callable[[], datetime] = utc_now

    async def run(self, upload: UploadFile) -> PredictResponse:
        async with stage_upload(upload, self.upload_dir, self.max_upload_bytes) as staged:
            content = staged.read_bytes()
            content_type = staged.content_type
            image_url = await run_in_threadpool(self.blob_store.save, staged.name, content, content_type)
            logger.info("image_stored", extra={"blob_key": staged.name, "size_bytes": staged.size})

        try:
            prediction = await self.predictor.predict(content, content_type)
            document = {
                **prediction.model_dump(by_alias=True),
                "createdAt": iso_timestamp(self.clock()),
                "imageUrl": image_url,
            }
            record_id = await run_in_threadpool(self.record_store.create, document)
        except Exception:
            # No compensation: the blob written above stays in the bucket.
            logger.warning("orphaned_blob", extra={"image_url": image_url})
            raise

        logger.info("prediction_recorded", extra={"record_id": record_id})
        return PredictResponse(message=SUCCESS_MESSAGE, data=PredictionRecord(id=record_id, **document))


def build_pipeline(settings: Settings) -> PredictionPipeline:
    blob_store, record_store = build_stores(settings)
    return PredictionPipeline(
        blob_store=blob_store,
        record_store=record_store,
        predictor=build_predictor(settings),
        upload_dir=Path(settings.upload_dir),
        max_upload_bytes=settings.max_upload_bytes,
    )


def error_response(exc: PredictionError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message).model_dump(),
    )
