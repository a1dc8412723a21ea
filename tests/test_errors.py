import pytest

from eye_disease_api.errors import (
    GENERIC_FAILURE_MESSAGE,
    InputMissing,
    PredictionError,
    PredictorUnavailable,
    RecordUnavailable,
    StoreUnavailable,
    UnexpectedFailure,
    ValidationFailed,
)
from eye_disease_api.services.prediction_service import error_response


@pytest.mark.parametrize(
    ("error_cls", "status_code", "message"),
    [
        (InputMissing, 400, "No file uploaded."),
        (ValidationFailed, 500, GENERIC_FAILURE_MESSAGE),
        (StoreUnavailable, 500, GENERIC_FAILURE_MESSAGE),
        (PredictorUnavailable, 500, GENERIC_FAILURE_MESSAGE),
        (RecordUnavailable, 500, GENERIC_FAILURE_MESSAGE),
        (UnexpectedFailure, 500, GENERIC_FAILURE_MESSAGE),
    ],
)
def test_each_error_maps_to_fixed_status_and_message(error_cls, status_code, message) -> None:
    exc = error_cls("internal cause")

    response = error_response(exc)

    assert response.status_code == status_code
    assert response.body == f'{{"message":"{message}"}}'.encode()
    assert exc.tag == error_cls.__name__


def test_detail_stays_server_side() -> None:
    exc = StoreUnavailable("bucket sightsafe is gone")

    assert exc.detail == "bucket sightsafe is gone"
    assert b"sightsafe" not in error_response(exc).body


def test_detail_defaults_to_message() -> None:
    assert InputMissing().detail == "No file uploaded."
    assert PredictionError().status_code == 500
