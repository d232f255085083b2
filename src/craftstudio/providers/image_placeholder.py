"""Placeholder image provider for offline runs.

Generates solid-color PNGs with no network access. The color depends only
on the prompt and input images, so identical calls give identical output.
"""

from __future__ import annotations

import hashlib
import struct
import zlib
from collections.abc import Sequence
from typing import TYPE_CHECKING

from craftstudio.providers.image import ImageResult

if TYPE_CHECKING:
    from craftstudio.models.assets import ImageAsset

# Muted colors, one per placeholder.
_PALETTE: list[tuple[int, int, int]] = [
    (88, 101, 130),  # slate blue
    (130, 88, 101),  # dusty rose
    (101, 130, 88),  # sage green
    (130, 118, 88),  # warm sand
    (88, 130, 125),  # teal
    (118, 88, 130),  # muted purple
]


def make_png(width: int, height: int, r: int, g: int, b: int) -> bytes:
    """Generate a minimal solid-color RGB PNG.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        r: Red channel (0-255).
        g: Green channel (0-255).
        b: Blue channel (0-255).

    Returns:
        Raw PNG bytes.
    """

    def _chunk(chunk_type: bytes, data: bytes) -> bytes:
        payload = chunk_type + data
        crc = struct.pack(">I", zlib.crc32(payload) & 0xFFFFFFFF)
        return struct.pack(">I", len(data)) + payload + crc

    sig = b"\x89PNG\r\n\x1a\n"
    # 8-bit depth, color type 2 (RGB)
    ihdr = _chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0))
    row = bytes([0]) + bytes([r, g, b]) * width
    idat = _chunk(b"IDAT", zlib.compress(row * height))
    iend = _chunk(b"IEND", b"")
    return sig + ihdr + idat + iend


class PlaceholderImageProvider:
    """Zero-cost image provider that returns solid-color PNGs.

    Args:
        size: Edge length of the square output image in pixels.
    """

    def __init__(self, size: int = 256) -> None:
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        self._size = size

    async def generate(
        self,
        prompt: str,
        images: Sequence[ImageAsset] = (),
    ) -> ImageResult:
        digest = hashlib.md5(prompt.encode())
        for image in images:
            digest.update(image.data)
        r, g, b = _PALETTE[int(digest.hexdigest(), 16) % len(_PALETTE)]

        return ImageResult(
            image_data=make_png(self._size, self._size, r, g, b),
            content_type="image/png",
            finish_reason="STOP",
            provider_metadata={
                "quality": "placeholder",
                "size": f"{self._size}x{self._size}",
                "color": f"#{r:02x}{g:02x}{b:02x}",
                "input_count": len(images),
                "prompt_preview": prompt[:80],
            },
        )
