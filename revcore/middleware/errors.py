"""Map engine errors onto HTTP responses."""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from revcore.errors import InconsistentState, InvalidInput, RevenueEngineError

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    InvalidInput: 422,
    InconsistentState: 409,
}


async def revenue_engine_error_handler(request: Request, exc: RevenueEngineError) -> JSONResponse:
    status_code = STATUS_BY_ERROR.get(type(exc), 400)
    if status_code == 409:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": str(exc),
            "error_type": exc.error_type,
        },
    )


def setup_error_handlers(app):
    """Register handlers so routes can let engine errors propagate."""
    app.add_exception_handler(RevenueEngineError, revenue_engine_error_handler)
