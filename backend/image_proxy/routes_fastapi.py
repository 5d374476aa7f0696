"""
Image Proxy API Routes

Provides endpoints for:
- Resizing external images (GET /fill/{width}/{height}/{source_url})
- Health check (GET /health)

Errors are returned as plain text.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response

from storage import OperationContext

from .processor import ImageFetchError, ImageProcessingError, ImageProcessor

logger = logging.getLogger(__name__)

# ============================================
# Router
# ============================================

router = APIRouter(tags=["Image Proxy"])


def _parse_dimension(raw: str) -> int:
    # Plain ASCII digits only; int() alone also accepts signs and whitespace
    if not (raw.isascii() and raw.isdigit()):
        raise ValueError(f"not a decimal integer: {raw!r}")
    value = int(raw)
    if value <= 0:
        raise ValueError(f"dimension must be positive: {value}")
    return value


# ============================================
# Endpoints
# ============================================

@router.get("/fill/{width}/{height}/{source_url:path}")
async def fill_image(width: str, height: str, source_url: str, request: Request):
    """
    Resize an external image to width x height and return it as JPEG.

    The original image is cached by source URL; resizing is redone on
    every request.

    Example:
        GET /fill/300/200/example.com/images/cat.jpg
    """
    try:
        target_width = _parse_dimension(width)
    except ValueError:
        return PlainTextResponse("Invalid width", status_code=400)

    try:
        target_height = _parse_dimension(height)
    except ValueError:
        return PlainTextResponse("Invalid height", status_code=400)

    if not source_url:
        return PlainTextResponse("URL is required", status_code=400)

    processor: ImageProcessor = request.app.state.processor
    settings = request.app.state.settings
    ctx = OperationContext.with_timeout(settings.request_timeout_seconds)

    try:
        result = await processor.process_image(ctx, source_url, target_width, target_height)
    except ImageFetchError as e:
        logger.error(f"[ImageProxy] Fetch failed for {source_url[:60]}: {e}")
        return PlainTextResponse(str(e), status_code=502)
    except ImageProcessingError as e:
        logger.error(f"[ImageProxy] Processing failed for {source_url[:60]}: {e}")
        return PlainTextResponse(str(e), status_code=500)

    logger.debug(
        f"[ImageProxy] Served {source_url[:60]} at {target_width}x{target_height} "
        f"({len(result.data)} bytes, cache {'hit' if result.cache_hit else 'miss'})"
    )

    return Response(
        content=result.data,
        media_type=result.content_type,
        headers={"X-Cache": "HIT" if result.cache_hit else "MISS"},
    )


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return Response(status_code=200)
