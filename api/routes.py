import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from metalens.core import get_metadata
from .schemas import ErrorResponse, HealthResponse, MetadataRequest, MetadataResponse

logger = logging.getLogger(__name__)

router = APIRouter()

URL_REQUIRED = {"error": "URL is required"}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid URL"},
    404: {"model": ErrorResponse, "description": "Domain or page not found"},
    422: {"model": ErrorResponse, "description": "Content is not parseable HTML"},
    500: {"model": ErrorResponse, "description": "Extraction failed"},
    503: {"model": ErrorResponse, "description": "Upstream site unreachable"},
}


async def _lookup(url: Optional[str]):
    if not url:
        return JSONResponse(status_code=400, content=URL_REQUIRED)

    # pipeline failures propagate as MetalensError to the app's exception handler
    metadata = await get_metadata(url)
    logger.info("Extracted metadata for %s: %r", url, metadata.title)
    return MetadataResponse.from_metadata(metadata, url)


@router.get(
    "/api/metadata",
    response_model=MetadataResponse,
    responses=ERROR_RESPONSES,
    summary="Extract page metadata for a URL",
)
async def metadata_by_query(url: Optional[str] = None):
    """
    Fetch `url` and return its title, standard meta tags, Open Graph and
    Twitter Card properties, plus description/image/url shortcuts.
    """
    return await _lookup(url)


@router.post(
    "/api/metadata",
    response_model=MetadataResponse,
    responses=ERROR_RESPONSES,
    summary="Extract page metadata for a URL",
)
async def metadata_by_body(request: MetadataRequest):
    return await _lookup(request.url)


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")
