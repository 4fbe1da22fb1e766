"""Shared fixtures: in-memory JPEG builders and a test client per codec."""

import base64
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from jpeg_resizer.config import Settings
from jpeg_resizer.main import create_app


def make_jpeg(width: int, height: int, color=(200, 120, 40)) -> bytes:
    img = Image.new("RGB", (width, height), color=color)
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=90)
    return buf.getvalue()


def make_jpeg_b64(width: int, height: int) -> str:
    return base64.b64encode(make_jpeg(width, height)).decode()


def jpeg_size(b64: str) -> tuple:
    with Image.open(io.BytesIO(base64.b64decode(b64))) as img:
        assert img.format == "JPEG"
        return img.size


@pytest.fixture(params=["opencv", "pillow"])
def codec_name(request):
    return request.param


@pytest.fixture
def client(codec_name):
    app = create_app(Settings(codec=codec_name, max_workers=2))
    with TestClient(app) as cli:
        yield cli
