"""
Image Proxy Module

Resizes external images on demand.

Features:
- Original images cached by source URL in a bounded LRU cache
- Resize to exact dimensions (LANCZOS), JPEG output
- Plain-text errors: 4xx for bad requests, 5xx for fetch/processing failures
"""

from .routes_fastapi import router
from .processor import ImageProcessor, ImageProcessingError, ImageFetchError

__all__ = ["router", "ImageProcessor", "ImageProcessingError", "ImageFetchError"]
