import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse

from metalens import __version__
from metalens.config import LOG_FORMAT, LOG_LEVEL
from metalens.errors import MetalensError, status_code_for
from .middleware import RequestLoggingMiddleware
from .routes import router

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

logger = logging.getLogger(__name__)


def create_app(initial_content: Optional[str] = None) -> FastAPI:
    """
    Build the API. When `initial_content` is given, GET / serves it as the
    preview page.
    """
    app = FastAPI(
        title="Metalens",
        description=(
            "Given any URL, returns page metadata: title, standard meta tags, "
            "Open Graph properties and Twitter Card properties."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(MetalensError)
    async def metalens_error_handler(request: Request, exc: MetalensError):
        logger.error("%s: %s", exc.error_type, exc.message)
        return JSONResponse(
            status_code=status_code_for(exc),
            content={"error": exc.message, "errorType": exc.error_type},
        )

    @app.exception_handler(RequestValidationError)
    async def invalid_request_handler(request: Request, exc: RequestValidationError):
        logger.warning("Rejected malformed request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request format"})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error: %s", exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch metadata", "errorType": "Error"},
        )

    app.include_router(router)

    if initial_content is not None:
        @app.get("/", response_class=HTMLResponse, include_in_schema=False)
        async def preview_page() -> HTMLResponse:
            return HTMLResponse(initial_content)

    return app


app = create_app()
