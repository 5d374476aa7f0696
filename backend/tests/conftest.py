"""
图片缩放代理 测试配置文件

这个文件包含 pytest fixtures（测试夹具）。
Fixtures 是测试的"准备工作"：在测试运行前创建所需的对象和环境。

关键概念：
- storage fixtures：内存存储 / 文件存储（使用 pytest 的 tmp_path 自动清理）
- mock_storage：用 unittest.mock 记录缓存对存储的每一次调用
- image fixtures：用 Pillow 生成的测试图片
"""

import io
import sys
from pathlib import Path
from unittest.mock import create_autospec

import pytest
from PIL import Image

# 添加 backend 目录到 Python 路径
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from storage import FileStorage, KeyNotFoundError, MemoryStorage, OperationContext, Storage


# ============================================
# Context Fixtures
# ============================================

@pytest.fixture
def ctx():
    """一个永不取消、没有截止时间的上下文。"""
    return OperationContext.background()


@pytest.fixture
def cancelled_ctx():
    """一个已经取消的上下文。"""
    context = OperationContext()
    context.cancel()
    return context


# ============================================
# Storage Fixtures
# ============================================

@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def file_storage(tmp_path):
    """
    文件存储，基础目录位于 tmp_path 下。

    测试结束后 pytest 会自动删除 tmp_path。
    """
    return FileStorage(tmp_path / "image_cache")


def _not_found(ctx, key):
    raise KeyNotFoundError(key)


@pytest.fixture
def mock_storage():
    """
    记录调用的 Storage mock。

    get() 默认抛出 KeyNotFoundError；其余方法默认成功。
    """
    storage = create_autospec(Storage, instance=True)
    storage.get.side_effect = _not_found
    storage.set.return_value = None
    storage.delete.return_value = None
    storage.size.return_value = 0
    return storage


# ============================================
# Image Fixtures
# ============================================

def make_image_bytes(width=64, height=48, color=(200, 30, 30), fmt="PNG", mode="RGB"):
    """生成指定尺寸和格式的图片字节。"""
    if mode == "RGBA" and len(color) == 3:
        color = color + (128,)
    img = Image.new(mode, (width, height), color)
    output = io.BytesIO()
    img.save(output, format=fmt)
    return output.getvalue()


@pytest.fixture
def png_bytes():
    return make_image_bytes()


# ============================================
# Helper Functions
# ============================================

def read_all(stream):
    """
    读取并关闭一个存储/缓存返回的二进制流。

    使用方式：
    ```python
    assert read_all(store.get(ctx, "key")) == b"value"
    ```
    """
    with stream:
        return stream.read()


def store_holds(storage, ctx, key):
    """断言辅助：存储中是否存在 key。"""
    try:
        read_all(storage.get(ctx, key))
    except KeyNotFoundError:
        return False
    return True
