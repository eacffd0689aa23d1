import io
import os
from typing import Tuple
from unittest.mock import MagicMock

import pytest
from PIL import Image

from exam_wallet.api.remote_store import RemoteStore
from exam_wallet.core.files import UploadedFile

PIL_NAMES = {"image/jpeg": "JPEG", "image/jpg": "JPEG", "image/png": "PNG", "image/webp": "WEBP"}
EXTENSIONS = {"image/jpeg": ".jpg", "image/jpg": ".jpg", "image/png": ".png", "image/webp": ".webp"}


def make_image(
    media_type: str = "image/jpeg",
    size: Tuple[int, int] = (640, 480),
    noise: bool = False,
    name: str = "",
    quality: int = 95,
) -> UploadedFile:
    """Build an in-memory image file. `noise` produces incompressible content."""
    width, height = size
    if noise:
        img = Image.frombytes("RGB", size, os.urandom(width * height * 3))
    else:
        img = Image.new("RGB", size, (30, 120, 200))
        for x in range(0, width, max(1, width // 8)):
            img.paste((200, 60, 40), (x, 0, min(width, x + 4), height))
    buffer = io.BytesIO()
    params = {"quality": quality} if PIL_NAMES[media_type] in ("JPEG", "WEBP") else {}
    img.save(buffer, format=PIL_NAMES[media_type], **params)
    return UploadedFile(
        content=buffer.getvalue(),
        media_type=media_type,
        name=name or f"photo{EXTENSIONS[media_type]}",
    )


def open_image(content: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(content))
    img.load()
    return img


@pytest.fixture
def remote() -> MagicMock:
    """RemoteStore double; async methods are AsyncMocks."""
    store = MagicMock(spec=RemoteStore)
    store.query.return_value = []
    store.get_public_url.side_effect = lambda bucket, path: f"https://cdn.example/{bucket}/{path}"
    return store


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
