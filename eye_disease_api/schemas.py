from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Prediction(_CamelModel):
    result: str
    confidence_score: float
    is_above_threshold: bool


class PredictionRecord(_CamelModel):
    id: str
    result: str
    confidence_score: float
    is_above_threshold: bool
    created_at: str
    image_url: str


class PredictResponse(BaseModel):
    message: str
    data: PredictionRecord


class ErrorResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    service: str
    storage_backend: str
