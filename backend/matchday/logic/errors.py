from starlette import status


class MatchdayError(Exception):
    """Base class for rejected operations. Nothing has been written when one is raised."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "MATCHDAY_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(MatchdayError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class AlreadyCompletedError(MatchdayError):
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_COMPLETED"


class InvalidTransitionError(MatchdayError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_TRANSITION"


class AlreadyInitializedError(InvalidTransitionError):
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_INITIALIZED"


class DuplicateNameError(MatchdayError):
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_NAME"
