import json

import httpx
import pytest

from eye_disease_api.config import Settings
from eye_disease_api.errors import PredictorUnavailable
from eye_disease_api.prediction import HttpPredictor, MockPredictor, build_predictor


@pytest.mark.asyncio
async def test_mock_predictor_returns_fixed_label() -> None:
    prediction = await MockPredictor().predict(b"any", "image/png")

    assert prediction.result == "Vascular lesion"
    assert prediction.confidence_score == 99.67641830444336
    assert prediction.is_above_threshold is True


@pytest.mark.asyncio
async def test_http_predictor_posts_photo_and_parses_reply() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(
            200,
            json={"result": "Melanoma", "confidenceScore": 71.5, "isAboveThreshold": False},
        )

    predictor = HttpPredictor("http://inference.local/predict", transport=httpx.MockTransport(handler))

    prediction = await predictor.predict(b"pixels", "image/png")

    assert seen["url"] == "http://inference.local/predict"
    assert b'name="photo"' in seen["body"]
    assert b"pixels" in seen["body"]
    assert prediction.result == "Melanoma"
    assert prediction.confidence_score == 71.5
    assert prediction.is_above_threshold is False


@pytest.mark.asyncio
async def test_http_predictor_wraps_upstream_errors() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="busy"))
    predictor = HttpPredictor("http://inference.local/predict", transport=transport)

    with pytest.raises(PredictorUnavailable):
        await predictor.predict(b"pixels", "image/png")


@pytest.mark.asyncio
async def test_http_predictor_rejects_malformed_reply() -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, content=json.dumps({"label": "x"}).encode())
    )
    predictor = HttpPredictor("http://inference.local/predict", transport=transport)

    with pytest.raises(PredictorUnavailable, match="invalid inference payload"):
        await predictor.predict(b"pixels", "image/png")


def test_build_predictor_defaults_to_mock() -> None:
    assert isinstance(build_predictor(Settings()), MockPredictor)


def test_build_predictor_uses_http_when_url_configured() -> None:
    predictor = build_predictor(Settings(prediction_service_url="http://inference.local/predict"))

    assert isinstance(predictor, HttpPredictor)
