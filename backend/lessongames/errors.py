"""Error codes and exceptions for the service boundary.

The game core itself never raises for bad input; it ignores it. These
errors cover what the core cannot: unknown sessions, missing preconditions
(an empty roster or word pool), and malformed collaborator payloads.
"""
from enum import Enum

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from lessongames.config import settings


class ErrorCode(str, Enum):
    """Service error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    EMPTY_ROSTER = "EMPTY_ROSTER"
    EMPTY_POOL = "EMPTY_POOL"
    INVALID_BOARD = "INVALID_BOARD"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    NO_OPEN_CLUE = "NO_OPEN_CLUE"
    CLUE_ALREADY_USED = "CLUE_ALREADY_USED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.EMPTY_ROSTER: 400,
    ErrorCode.EMPTY_POOL: 400,
    ErrorCode.INVALID_BOARD: 422,
    ErrorCode.INVALID_PAYLOAD: 422,
    ErrorCode.NO_OPEN_CLUE: 409,
    ErrorCode.CLUE_ALREADY_USED: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Whether retrying (after fixing local state) can succeed.
ERROR_RECOVERABLE: dict[ErrorCode, bool] = {
    ErrorCode.INVALID_REQUEST: False,
    ErrorCode.SESSION_NOT_FOUND: False,
    ErrorCode.EMPTY_ROSTER: False,
    ErrorCode.EMPTY_POOL: False,
    ErrorCode.INVALID_BOARD: True,
    ErrorCode.INVALID_PAYLOAD: True,
    ErrorCode.NO_OPEN_CLUE: True,
    ErrorCode.CLUE_ALREADY_USED: True,
    ErrorCode.INTERNAL_ERROR: True,
}


class ErrorBody(BaseModel):
    code: str
    message: str
    recoverable: bool


class ErrorResponse(BaseModel):
    protocolVersion: str = settings.protocol_version
    error: ErrorBody


class GameError(Exception):
    """Base game error that maps to a protocol error response."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.message = message or f"Error: {code.value}"
        self.status_code = ERROR_HTTP_STATUS[code]
        self.recoverable = ERROR_RECOVERABLE[code]
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(
                error=ErrorBody(
                    code=self.code.value,
                    message=self.message,
                    recoverable=self.recoverable,
                )
            ).model_dump(),
        )
