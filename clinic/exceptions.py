from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class SchedulingError(Exception):
    """Base class for errors raised by the scheduling core.

    All of them are recoverable: the caller shows the message and lets the
    user retry with different input.
    """
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidDate(SchedulingError):
    status_code = 400


class ValidationError(SchedulingError):
    status_code = 422


class InvalidTransition(SchedulingError):
    status_code = 409


class ConflictError(SchedulingError):
    status_code = 409


class SlotUnavailable(ConflictError):
    pass


class NotFoundError(SchedulingError):
    status_code = 404


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )

async def scheduling_exception_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    """Render scheduling errors with the same envelope as HTTP errors"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
