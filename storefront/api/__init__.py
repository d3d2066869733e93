# storefront/api/__init__.py
from collections import defaultdict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.domain.errors import ShopError, error_body
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_LOCATIONS = {"body", "query", "path", "cookie", "header"}


def _field_errors(exc: RequestValidationError) -> dict:
    errors = defaultdict(list)
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if str(p) not in _LOCATIONS]
        field = ".".join(loc) or "__root__"
        errors[field].append(err.get("msg", "invalid"))
    return dict(errors)


def register_exception_handlers(app: FastAPI) -> None:
    """Bledy domeny i walidacji renderowane w kopercie {success, message, errors}."""

    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.message} ({exc.detail})")
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "message": "Blad walidacji",
                "errors": _field_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path}: nieoczekiwany blad")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Nieoczekiwany blad serwera", "error": str(exc)},
        )
