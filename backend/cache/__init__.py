"""
Cache Module
缓存模块

Bounded LRU cache of original image bytes, layered over a pluggable
backing store (see the storage package).
"""

from .lru_cache import LRUCache
from .routes import router as cache_router

__all__ = [
    "LRUCache",
    "cache_router",
]
