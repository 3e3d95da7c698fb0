"""The entrypoint of the FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Final

import secure
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from dataportal.constants import CORS_HEADERS, __version__
from dataportal.db import ENGINE, SUBMISSION_ENGINE
from dataportal.exceptions import InternalError, MethodNotAllowed, PortalError
from dataportal.logutils import set_log_handler
from dataportal.routers import connect, explorer
from dataportal.settings import get_settings


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Handle setup and teardown."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    set_log_handler()
    logger = logging.getLogger(__name__)
    logger.info("Starting data portal API %s", __version__)

    yield

    logger.warning("Shutting down server...")

    logger.info("Disposing of database engines")
    await ENGINE.dispose()
    await SUBMISSION_ENGINE.dispose()


app = FastAPI(
    title="Data Portal API",
    description="Data explorer and page connection API for the web portal",
    version=__version__,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=lifespan,
)

server = secure.Server().set("Secure")

xfo = secure.XFrameOptions().deny()

hsts = secure.StrictTransportSecurity().include_subdomains().preload().max_age(2592000)

referrer = secure.ReferrerPolicy().no_referrer()

cache_value = secure.CacheControl().must_revalidate()

SECURE_HEADERS: Final = secure.Secure(
    server=server,
    hsts=hsts,
    xfo=xfo,
    referrer=referrer,
    cache=cache_value,
)


@app.middleware("http")
async def set_secure_headers(request: Any, call_next: Callable[[Any], Any]) -> Any:
    """Set security and CORS headers for HTTP response."""
    response = await call_next(request)
    SECURE_HEADERS.framework.fastapi(response)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(PortalError)
async def portal_error_handler(_: Request, exc: PortalError) -> JSONResponse:
    """Report our own errors as JSON with the right status code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(405)
async def method_not_allowed_handler(_: Request, __: HTTPException) -> JSONResponse:
    """Only POST and OPTIONS are served."""
    exc = MethodNotAllowed()
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def internal_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Report any other error as a 500.

    This handler runs outside the middleware, so it sets the CORS headers itself.
    """
    error = InternalError(detail=str(exc))
    return JSONResponse(
        status_code=error.status_code, content=error.to_dict(), headers=CORS_HEADERS
    )


app.include_router(explorer.router, prefix="", tags=["Data explorer"])
app.include_router(connect.router, prefix="", tags=["Connections"])
