"""
Image Processor

Handles:
- Looking up the original image in the LRU cache (keyed by source URL)
- Downloading it from the origin on a cache miss
- Re-encoding the original as JPEG for the cache
- Resizing to the requested dimensions and encoding the result
"""

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Tuple

import httpx
from PIL import Image

from cache import LRUCache
from storage import ContextError, KeyNotFoundError, OperationContext

logger = logging.getLogger(__name__)

OUTPUT_CONTENT_TYPE = "image/jpeg"


class ImageProcessingError(Exception):
    """Raised when an image cannot be loaded, decoded or encoded."""


class ImageFetchError(ImageProcessingError):
    """Raised when the origin server cannot deliver the source image."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class ProcessedImage:
    """Result of resizing a source image."""
    data: bytes
    content_type: str
    width: int
    height: int
    cache_hit: bool


def normalize_source_url(url: str) -> str:
    """Source URLs arrive without a scheme; default to plain http."""
    if url.startswith(("http://", "https://")):
        return url
    return "http://" + url


class ImageProcessor:
    """
    Resizes source images, caching the originals.

    The cache holds the decoded-and-reencoded original, not resized
    variants, so every size is produced from the same cached bytes.

    Usage:
        processor = ImageProcessor(cache)
        result = await processor.process_image(ctx, "example.com/cat.jpg", 300, 200)
        await processor.close()
    """

    def __init__(
        self,
        cache: LRUCache,
        http_client: Optional[httpx.AsyncClient] = None,
        fetch_timeout: float = 30.0,
        jpeg_quality: int = 85,
    ):
        self.cache = cache
        self.jpeg_quality = jpeg_quality
        self.http_client = http_client or httpx.AsyncClient(
            timeout=fetch_timeout,
            follow_redirects=True,
            headers={
                "User-Agent": "Mozilla/5.0 (compatible; image-resize-proxy/1.0)",
                "Accept": "image/*,*/*;q=0.8",
            },
        )

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def get_original_image(self, ctx: OperationContext, url: str) -> Tuple[Image.Image, bool]:
        """
        Get the original image, from the cache or the origin.

        Returns:
            Tuple of (image, cache_hit)
        """
        cache_key = url

        try:
            cached = await asyncio.to_thread(self.cache.get, ctx, cache_key)
        except KeyNotFoundError:
            cached = None
        except Exception as e:
            raise ImageProcessingError(f"failed to get from cache: {e}") from e

        if cached is not None:
            try:
                return _decode(cached.read()), True
            except Exception as e:
                raise ImageProcessingError(f"failed to decode cached image: {e}") from e

        image_data = await self._download(ctx, url)

        try:
            img = _decode(image_data)
        except Exception as e:
            raise ImageProcessingError(f"failed to decode image: {e}") from e

        try:
            encoded = await asyncio.to_thread(_encode_jpeg, img, self.jpeg_quality)
        except Exception as e:
            raise ImageProcessingError(f"failed to encode image for cache: {e}") from e

        try:
            await asyncio.to_thread(self.cache.set, ctx, cache_key, encoded)
        except Exception as e:
            raise ImageProcessingError(f"failed to cache image: {e}") from e

        return img, False

    async def process_image(self, ctx: OperationContext, url: str, width: int, height: int) -> ProcessedImage:
        """Resize the source image at url to exactly width x height."""
        img, cache_hit = await self.get_original_image(ctx, url)

        try:
            data = await asyncio.to_thread(self._resize_and_encode, img, width, height)
        except Exception as e:
            raise ImageProcessingError(f"failed to encode image: {e}") from e

        return ProcessedImage(
            data=data,
            content_type=OUTPUT_CONTENT_TYPE,
            width=width,
            height=height,
            cache_hit=cache_hit,
        )

    async def _download(self, ctx: OperationContext, url: str) -> bytes:
        try:
            ctx.check()
        except ContextError as e:
            raise ImageProcessingError(str(e)) from e

        source_url = normalize_source_url(url)
        request_kwargs = {}
        remaining = ctx.remaining()
        if remaining is not None:
            request_kwargs["timeout"] = remaining

        logger.info(f"[ImageProxy] Fetching: {source_url[:80]}...")
        try:
            response = await self.http_client.get(source_url, **request_kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[ImageProxy] Fetch error for {source_url[:60]}: {e}")
            raise ImageFetchError(f"failed to download image: {e}") from e

        if response.status_code != 200:
            logger.error(f"[ImageProxy] HTTP error {response.status_code}: {source_url[:60]}...")
            raise ImageFetchError(
                f"server returned status: {response.status_code}",
                status_code=response.status_code,
            )

        return response.content

    def _resize_and_encode(self, img: Image.Image, width: int, height: int) -> bytes:
        resized = img.resize((width, height), Image.Resampling.LANCZOS)
        return _encode_jpeg(resized, self.jpeg_quality)


def _decode(data: bytes) -> Image.Image:
    img = Image.open(BytesIO(data))
    img.load()
    return img


def _encode_jpeg(img: Image.Image, quality: int) -> bytes:
    # JPEG has no alpha channel
    if img.mode in ("RGBA", "LA", "P"):
        if img.mode == "P":
            img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        img = background
    elif img.mode != "RGB":
        img = img.convert("RGB")

    output = BytesIO()
    img.save(output, format="JPEG", quality=quality)
    return output.getvalue()
