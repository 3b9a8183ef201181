"""Shared fixtures: in-memory test images and a dict-backed asset store."""
from __future__ import annotations

import io

import pytest
from PIL import Image

from imgpipe.errors import AssetNotFoundError


def make_image_bytes(size, color, *, mode="RGB", fmt="PNG") -> bytes:
    img = Image.new(mode, size, color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def open_bytes(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


class MemoryAssetStore:
    """Asset store backed by a dict; records every key fetched."""

    def __init__(self, assets: dict[str, bytes]) -> None:
        self.assets = assets
        self.fetched: list[str] = []

    def fetch(self, key: str) -> bytes:
        self.fetched.append(key)
        try:
            return self.assets[key]
        except KeyError as exc:
            raise AssetNotFoundError(key) from exc


@pytest.fixture
def assets() -> dict[str, bytes]:
    return {
        "white.png": make_image_bytes((100, 50), (255, 255, 255)),
        "square.png": make_image_bytes((20, 20), (255, 255, 255)),
        "red.png": make_image_bytes((10, 10), (255, 0, 0, 255), mode="RGBA"),
        "blue.png": make_image_bytes((10, 10), (0, 0, 255, 255), mode="RGBA"),
        "photo.jpg": make_image_bytes((150, 100), (30, 120, 200), fmt="JPEG"),
        "broken.png": b"definitely not an image",
    }


@pytest.fixture
def store(assets) -> MemoryAssetStore:
    return MemoryAssetStore(assets)
