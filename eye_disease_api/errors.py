from fastapi import status

GENERIC_FAILURE_MESSAGE = "An error occurred during prediction."


class PredictionError(Exception):
    """Base of the tagged pipeline errors.

    ``message`` is what the client sees; ``detail`` stays in server logs.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = GENERIC_FAILURE_MESSAGE

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.message)
        self.detail = detail or self.message

    @property
    def tag(self) -> str:
        return type(self).__name__


class InputMissing(PredictionError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "No file uploaded."


class ValidationFailed(PredictionError):
    pass


class StoreUnavailable(PredictionError):
    pass


class PredictorUnavailable(PredictionError):
    pass


class RecordUnavailable(PredictionError):
    pass


class UnexpectedFailure(PredictionError):
    pass
