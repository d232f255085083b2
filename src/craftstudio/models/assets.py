"""Image payloads that flow through a generation request."""

from __future__ import annotations

import base64
from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path  # noqa: TC003 - used at runtime

_SUFFIX_TO_MIME: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


class AssetRole(StrEnum):
    """Logical role of an image within one request."""

    TEMPLATE = "template"
    REFERENCE = "reference"
    LOGO = "logo"
    CANONICAL = "canonical"
    RESULT = "result"
    PRODUCT = "product"
    PERSON = "person"
    PROP = "prop"


@dataclass(frozen=True)
class ImageAsset:
    """Raw image bytes plus MIME type and role.

    Assets are created once and never mutated. They belong to the request
    that produced them and are not cached across requests.

    Attributes:
        data: Raw image bytes.
        mime_type: MIME type (e.g., ``image/png``).
        role: Logical role of this image in the request.
    """

    data: bytes
    mime_type: str = "image/png"
    role: AssetRole = AssetRole.TEMPLATE

    def __repr__(self) -> str:
        return (
            f"ImageAsset(role={self.role.value!r}, mime_type={self.mime_type!r}, "
            f"size={self.size_bytes})"
        )

    @property
    def size_bytes(self) -> int:
        """Size of image data in bytes."""
        return len(self.data)

    def to_base64(self) -> str:
        """Return the payload as a base64 string."""
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        """Return the payload as a ``data:`` URL."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    def with_role(self, role: AssetRole) -> ImageAsset:
        """Return a copy of this asset tagged with a different role."""
        return replace(self, role=role)

    @classmethod
    def from_base64(
        cls,
        b64_data: str,
        mime_type: str = "image/png",
        role: AssetRole = AssetRole.RESULT,
    ) -> ImageAsset:
        """Create from base64-encoded image data."""
        return cls(data=base64.b64decode(b64_data), mime_type=mime_type, role=role)

    @classmethod
    def from_path(cls, path: Path, role: AssetRole = AssetRole.TEMPLATE) -> ImageAsset:
        """Read an image file from disk.

        The MIME type is derived from the file suffix; unknown suffixes
        fall back to ``application/octet-stream`` and are left for the
        image provider to reject.
        """
        mime_type = _SUFFIX_TO_MIME.get(path.suffix.lower(), "application/octet-stream")
        return cls(data=path.read_bytes(), mime_type=mime_type, role=role)


def extension_for(mime_type: str) -> str:
    """Return a file extension (with dot) for a MIME type."""
    for suffix, mime in _SUFFIX_TO_MIME.items():
        if mime == mime_type and suffix != ".jpeg":
            return suffix
    return ".png"
