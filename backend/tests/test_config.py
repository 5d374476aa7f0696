"""
配置与应用装配测试
"""

import pytest

from config import ProxySettings
from main import build_storage, create_app
from storage import FileStorage, MemoryStorage, StorageError


class TestProxySettings:
    """环境变量读取测试"""

    def test_defaults(self, monkeypatch):
        for name in ("PORT", "CACHE_CAPACITY", "STORAGE_TYPE", "IMAGE_CACHE_DIR", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = ProxySettings.from_env()

        assert settings.port == 8081
        assert settings.cache_capacity == 5
        assert settings.storage_type == "file"
        assert settings.cache_dir == "./image_cache"
        assert not settings.use_memory_storage

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("CACHE_CAPACITY", "42")
        monkeypatch.setenv("STORAGE_TYPE", "memory")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = ProxySettings.from_env()

        assert settings.port == 9000
        assert settings.cache_capacity == 42
        assert settings.use_memory_storage
        assert settings.log_level == "DEBUG"

    def test_invalid_capacity_falls_back(self, monkeypatch):
        """测试：无法解析的容量回退到默认值"""
        monkeypatch.setenv("CACHE_CAPACITY", "lots")

        assert ProxySettings.from_env().cache_capacity == 5


class TestBuildStorage:
    """存储选择测试"""

    def test_memory(self):
        assert isinstance(build_storage(ProxySettings(storage_type="memory")), MemoryStorage)

    def test_file(self, tmp_path):
        storage = build_storage(ProxySettings(storage_type="file", cache_dir=str(tmp_path / "cache")))
        assert isinstance(storage, FileStorage)

    def test_file_with_missing_parent_fails(self, tmp_path):
        settings = ProxySettings(storage_type="file", cache_dir=str(tmp_path / "missing" / "cache"))
        with pytest.raises(StorageError):
            create_app(settings)

    def test_create_app_wires_injected_storage(self):
        storage = MemoryStorage()
        app = create_app(ProxySettings(storage_type="memory", cache_capacity=3), storage=storage)

        assert app.state.cache.storage is storage
        assert app.state.cache.capacity == 3
        assert app.state.processor.cache is app.state.cache
