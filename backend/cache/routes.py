"""
Cache API Routes
缓存 API 路由

Provides HTTP endpoints for cache inspection and invalidation:
- GET    /api/cache/stats     - Get cache statistics
- GET    /api/cache/keys      - List cached source URLs (most recent first)
- DELETE /api/cache?url=...   - Invalidate one source URL
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from storage import ContextError, OperationContext, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cache", tags=["cache"])


# ============================================
# Response Models
# ============================================

class CacheStatsResponse(BaseModel):
    """Response model for stats endpoint"""
    storage_type: str
    capacity: int
    cached_entries: int
    storage_size: int
    hits: int
    misses: int
    evictions: int

class CacheKeysResponse(BaseModel):
    """Response model for keys endpoint"""
    success: bool
    count: int
    keys: List[str] = Field(default_factory=list, description="Most recently used first")

class CacheDeleteResponse(BaseModel):
    """Response model for delete endpoint"""
    success: bool
    message: str


# ============================================
# API Endpoints
# ============================================

@router.get("/stats", response_model=CacheStatsResponse)
async def get_cache_stats(request: Request):
    """
    Get cache statistics
    获取缓存统计信息
    """
    cache = request.app.state.cache
    stats = await asyncio.to_thread(cache.stats)
    return CacheStatsResponse(
        storage_type=request.app.state.settings.storage_type,
        **stats,
    )


@router.get("/keys", response_model=CacheKeysResponse)
async def list_cache_keys(request: Request):
    """List source URLs currently held in the in-memory index."""
    keys = await asyncio.to_thread(request.app.state.cache.keys)
    return CacheKeysResponse(success=True, count=len(keys), keys=keys)


@router.delete("", response_model=CacheDeleteResponse)
async def delete_cache_entry(
    request: Request,
    url: str = Query(..., description="Source URL to invalidate"),
):
    """
    Delete cache entry
    删除缓存条目

    Removes the URL from the index and the backing store. Deleting a URL
    that is not cached succeeds.
    """
    settings = request.app.state.settings
    ctx = OperationContext.with_timeout(settings.request_timeout_seconds)
    try:
        await asyncio.to_thread(request.app.state.cache.delete, ctx, url)
    except (StorageError, ContextError) as e:
        logger.error(f"[CacheAPI] Failed to delete {url[:60]}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return CacheDeleteResponse(success=True, message=f"Deleted cache entry: {url}")
