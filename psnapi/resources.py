"""Upload resources (images) sent as multipart bodies."""
from typing import Union

from .errors import ValidationError

# (signature, mime type) pairs checked against the leading bytes
_SIGNATURES = (
    (b'\xff\xd8\xff', 'image/jpeg'),
    (b'\x89PNG\r\n\x1a\n', 'image/png'),
    (b'GIF87a', 'image/gif'),
    (b'GIF89a', 'image/gif'),
    (b'BM', 'image/bmp'),
)


def sniff_mime_type(data: bytes) -> str:
    """Return the MIME type implied by *data*'s magic number.

    Unknown content is reported as ``application/octet-stream``.
    """
    for signature, mime_type in _SIGNATURES:
        if data.startswith(signature):
            return mime_type
    if data[:4] == b'RIFF' and data[8:12] == b'WEBP':
        return 'image/webp'
    return 'application/octet-stream'


class Image:
    """Raw image bytes plus the MIME type detected from them."""

    def __init__(self, data: bytes) -> None:
        if not isinstance(data, (bytes, bytearray)) or not data:
            raise ValidationError("Image data must be a non-empty bytes object")
        self._data = bytes(data)
        self._type = sniff_mime_type(self._data)

    @classmethod
    def from_file(cls, path: str) -> 'Image':
        with open(path, 'rb') as fh:
            return cls(fh.read())

    @classmethod
    def coerce(cls, image: Union['Image', bytes]) -> 'Image':
        """Accept either an :class:`Image` or raw bytes."""
        return image if isinstance(image, cls) else cls(image)

    def data(self) -> bytes:
        return self._data

    def type(self) -> str:
        return self._type

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Image(type={self._type!r}, size={len(self._data)})"
