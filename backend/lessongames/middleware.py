"""Request logging and error-to-response conversion."""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from lessongames.errors import ErrorCode, GameError


logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Turn any escaping exception into a protocol error body.

    GameErrors keep their own code; anything else is logged with its
    traceback and reported as INTERNAL_ERROR.
    """

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except GameError as e:
            logger.info("%s %s -> %s", request.method, request.url.path, e.code.value)
            return e.to_response()
        except Exception as e:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return GameError(ErrorCode.INTERNAL_ERROR, str(e)).to_response()

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            "%s %s -> %d in %.1fms",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response
