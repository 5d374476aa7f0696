"""
Proxy Configuration

Settings are read from environment variables once at startup and passed
explicitly to the components that need them.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_CACHE_CAPACITY = 5


def _int_env(name: str, default: int) -> int:
    """Read an integer env var, falling back to default on absence or garbage."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[Config] Invalid integer for {name}: {raw!r}, using {default}")
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[Config] Invalid number for {name}: {raw!r}, using {default}")
        return default


@dataclass
class ProxySettings:
    """Process-level settings for the image resize proxy."""
    # Server
    host: str = "0.0.0.0"
    port: int = 8081
    log_level: str = "INFO"

    # Cache
    cache_capacity: int = DEFAULT_CACHE_CAPACITY
    storage_type: str = "file"          # "memory" or anything else for file
    cache_dir: str = "./image_cache"

    # Processing
    fetch_timeout_seconds: float = 30.0
    request_timeout_seconds: float = 30.0
    jpeg_quality: int = 85

    @property
    def use_memory_storage(self) -> bool:
        return self.storage_type == "memory"

    @classmethod
    def from_env(cls) -> "ProxySettings":
        return cls(
            host=os.getenv("HOST", cls.host),
            port=_int_env("PORT", cls.port),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            cache_capacity=_int_env("CACHE_CAPACITY", DEFAULT_CACHE_CAPACITY),
            storage_type=os.getenv("STORAGE_TYPE", cls.storage_type).lower(),
            cache_dir=os.getenv("IMAGE_CACHE_DIR", cls.cache_dir),
            fetch_timeout_seconds=_float_env("FETCH_TIMEOUT_SECONDS", cls.fetch_timeout_seconds),
            request_timeout_seconds=_float_env("REQUEST_TIMEOUT_SECONDS", cls.request_timeout_seconds),
            jpeg_quality=_int_env("JPEG_QUALITY", cls.jpeg_quality),
        )
