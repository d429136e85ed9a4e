# storefront/api/__init__.py
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.routers import cart, checkout
from storefront.api.routers.health import router as health_router
from storefront.domain.errors import GatewayError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def error_response(request: Request, status_code: int, message: str, headers=None) -> JSONResponse:
    #ten sam ksztalt bledu co w proxy API sklepu: {error, timestamp, path}
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
        },
        headers=headers,
    )


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    logger.error(f"{request.url.path}: blad API Gateway: {exc.message}")
    return error_response(request, 502, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.info(f"{request.url.path}: {exc.status_code} {exc.detail}")
    return error_response(request, exc.status_code, str(exc.detail), getattr(exc, "headers", None))


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Cart Service",
        version="1.0.0",
    )

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(health_router)
    app.include_router(cart.router)
    app.include_router(checkout.router)

    return app
