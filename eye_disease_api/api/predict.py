from fastapi import APIRouter, Depends, Request

from eye_disease_api.errors import PredictionError, UnexpectedFailure
from eye_disease_api.schemas import ErrorResponse, PredictResponse
from eye_disease_api.services.prediction_service import PredictionPipeline
from eye_disease_api.upload import read_upload_form, select_photo

router = APIRouter(prefix="/eye-disease", tags=["prediction"])

# The form is read by hand so the size ceiling and extra file parts are enforced while parsing.
_PHOTO_REQUEST_BODY = {
    "required": True,
    "content": {
        "multipart/form-data": {
            "schema": {
                "type": "object",
                "properties": {"photo": {"type": "string", "format": "binary"}},
                "required": ["photo"],
            }
        }
    },
}


def get_pipeline(request: Request) -> PredictionPipeline:
    return request.app.state.pipeline


@router.post(
    "/predict",
    response_model=PredictResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    openapi_extra={"requestBody": _PHOTO_REQUEST_BODY},
)
async def predict(
    request: Request,
    pipeline: PredictionPipeline = Depends(get_pipeline),
) -> PredictResponse:
    form = await read_upload_form(request, pipeline.max_upload_bytes)
    try:
        photo = select_photo(form)
        response = await pipeline.run(photo)
    except PredictionError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise UnexpectedFailure(f"{type(exc).__name__}: {exc}") from exc
    finally:
        await form.close()
    request.app.state.metrics.record_prediction("ok")
    return response
