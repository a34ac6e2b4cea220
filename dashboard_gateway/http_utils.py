"""HTTP helpers for gateway route handlers."""

from fastapi.responses import JSONResponse

from .models import ErrorResponse


def error_response(status_code: int, error_label: str, detail: str | None = None) -> JSONResponse:
    """Return the stable gateway error envelope."""
    payload = ErrorResponse(error=error_label, detail=detail)
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))
