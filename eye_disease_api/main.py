import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from eye_disease_api.api.health import router as health_router
from eye_disease_api.api.predict import router as predict_router
from eye_disease_api.config import Settings, load_settings
from eye_disease_api.errors import PredictionError, UnexpectedFailure
from eye_disease_api.observability import MetricsRegistry, RequestMetricsAndLoggingMiddleware, configure_logging
from eye_disease_api.services.prediction_service import PredictionPipeline, build_pipeline, error_response

logger = logging.getLogger("eye_disease.predict")


def create_app(
    settings: Settings | None = None,
    pipeline: PredictionPipeline | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)

    app = FastAPI(title="Eye Disease Prediction API", version="0.1.0")
    app.state.settings = settings
    app.state.pipeline = pipeline or build_pipeline(settings)
    app.state.metrics = MetricsRegistry()

    app.add_middleware(
        RequestMetricsAndLoggingMiddleware,
        registry=app.state.metrics,
        enable_metrics=settings.enable_metrics,
    )
    app.add_exception_handler(PredictionError, handle_prediction_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router)
    app.include_router(predict_router)
    return app


async def handle_prediction_error(request: Request, exc: PredictionError) -> JSONResponse:
    extra = {
        "request_id": getattr(request.state, "request_id", None),
        "error": exc.tag,
        "detail": exc.detail,
    }
    if exc.status_code < 500:
        logger.warning("prediction_rejected", extra=extra)
    else:
        logger.error("prediction_failed", exc_info=exc.__cause__, extra=extra)
    request.app.state.metrics.record_prediction(exc.tag)
    return error_response(exc)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    # Only reached for failures outside the predict route; that route converts them itself.
    logger.error(
        "unexpected_error",
        exc_info=exc,
        extra={"request_id": getattr(request.state, "request_id", None), "error": type(exc).__name__},
    )
    request.app.state.metrics.record_prediction(UnexpectedFailure.__name__)
    return error_response(UnexpectedFailure(str(exc)))


def run() -> None:
    settings = load_settings()
    configure_logging(settings)
    logger.info("Server running on http://localhost:%s", settings.port)
    uvicorn.run("eye_disease_api.main:create_app", factory=True, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
