# easybuy/api/errors.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from easybuy.domain.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    ShopError,
    UpstreamError,
    ValidationError,
)
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)

# kolejnosc ma znaczenie: pierwsza pasujaca klasa wygrywa
_STATUS = (
    (ValidationError, 400),
    (AuthError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (UpstreamError, 502),
)


def status_for(exc: ShopError) -> int:
    for cls, status in _STATUS:
        if isinstance(exc, cls):
            return status
    return 500


async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=status, content={"message": exc.message}, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopError, shop_error_handler)
