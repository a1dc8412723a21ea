from typing import Protocol

import httpx
from pydantic import ValidationError

from eye_disease_api.config import Settings
from eye_disease_api.errors import PredictorUnavailable
from eye_disease_api.schemas import Prediction

MOCK_PREDICTION = Prediction(
    result="Vascular lesion",
    confidence_score=99.67641830444336,
    is_above_threshold=True,
)


class Predictor(Protocol):
    name: str

    async def predict(self, image: bytes, content_type: str) -> Prediction: ...


class MockPredictor:
    """Stand-in for the classifier: every image gets the same label."""

    name = "mock"

    async def predict(self, image: bytes, content_type: str) -> Prediction:
        return MOCK_PREDICTION.model_copy()


class HttpPredictor:
    """Delegates classification to an external inference service.

    The service receives the image as the multipart field ``photo`` and must
    reply with ``{"result", "confidenceScore", "isAboveThreshold"}``.
    """

    name = "http"

    def __init__(
        self,
        url: str,
        timeout_s: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout_s = timeout_s
        self._transport = transport

    async def predict(self, image: bytes, content_type: str) -> Prediction:
        try:
            async with httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport) as client:
                response = await client.post(
                    self._url,
                    files={"photo": ("image", image, content_type)},
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PredictorUnavailable(f"inference call to {self._url} failed: {exc}") from exc

        try:
            return Prediction.model_validate(payload)
        except ValidationError as exc:
            raise PredictorUnavailable(f"invalid inference payload: {exc}") from exc


def build_predictor(settings: Settings) -> Predictor:
    if settings.prediction_service_url:
        return HttpPredictor(settings.prediction_service_url, timeout_s=settings.prediction_timeout_seconds)
    return MockPredictor()
