"""
Image Resize Proxy - application entry point.

Wires settings -> storage -> LRU cache -> image processor and exposes them
to the routers through app.state.

Run:
    cd backend
    python main.py
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI

from cache import LRUCache, cache_router
from config import ProxySettings
from image_proxy import ImageProcessor
from image_proxy import router as image_proxy_router
from storage import FileStorage, MemoryStorage, Storage, StorageError

logger = logging.getLogger(__name__)


def build_storage(settings: ProxySettings) -> Storage:
    """Create the backing store selected by STORAGE_TYPE."""
    if settings.use_memory_storage:
        logger.info("[ImageProxy] Using memory storage")
        return MemoryStorage()
    logger.info(f"[ImageProxy] Using file storage at {settings.cache_dir}")
    return FileStorage(settings.cache_dir)


def create_app(
    settings: Optional[ProxySettings] = None,
    storage: Optional[Storage] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Raises:
        StorageError: if the file storage base directory is unusable.
    """
    settings = settings or ProxySettings.from_env()
    if storage is None:
        storage = build_storage(settings)

    cache = LRUCache(settings.cache_capacity, storage)
    processor = ImageProcessor(
        cache,
        http_client=http_client,
        fetch_timeout=settings.fetch_timeout_seconds,
        jpeg_quality=settings.jpeg_quality,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"[ImageProxy] Starting (cache capacity: {settings.cache_capacity}, "
            f"storage: {settings.storage_type})"
        )
        yield
        await processor.close()
        logger.info("[ImageProxy] Stopped")

    app = FastAPI(title="Image Resize Proxy", lifespan=lifespan)
    app.state.settings = settings
    app.state.cache = cache
    app.state.processor = processor

    app.include_router(image_proxy_router)
    app.include_router(cache_router)

    return app


def main():
    settings = ProxySettings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        app = create_app(settings)
    except StorageError as e:
        logger.error(f"[ImageProxy] Failed to initialize storage: {e}")
        sys.exit(1)

    logger.info(f"[ImageProxy] Server listening on :{settings.port} (cache capacity: {settings.cache_capacity})")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
