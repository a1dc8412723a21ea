from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from eye_disease_api.schemas import HealthResponse

SERVICE_NAME = "eye-disease-api"

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    return HealthResponse(status="ok", service=SERVICE_NAME, storage_backend=settings.storage_backend)


@router.get("/metrics", include_in_schema=False)
def metrics(request: Request) -> PlainTextResponse:
    if not request.app.state.settings.enable_metrics:
        raise HTTPException(status_code=404, detail="metrics disabled")
    return PlainTextResponse(
        request.app.state.metrics.render_prometheus(),
        media_type="text/plain; version=0.0.4",
    )
