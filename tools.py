import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError


class PhotoTools:
    """Helpers for progress photos stored as embedded data URLs."""

    DEFAULT_MEDIA_TYPE: str = "application/octet-stream"

    @classmethod
    def sniff_media_type(cls, data: bytes) -> str:
        """Return the MIME type Pillow recognises for ``data``, if any."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                fmt = img.format
        except (UnidentifiedImageError, OSError):
            return cls.DEFAULT_MEDIA_TYPE
        return Image.MIME.get(fmt or "", cls.DEFAULT_MEDIA_TYPE)

    @staticmethod
    def to_data_url(data: bytes, media_type: str) -> str:
        b64 = base64.b64encode(data).decode("ascii")
        return f"data:{media_type};base64,{b64}"

    @staticmethod
    def parse_data_url(url: str) -> tuple[str, bytes]:
        """Split a base64 data URL into ``(media_type, payload)``."""
        if not url.startswith("data:"):
            raise ValueError("image must be a data URL")
        header, sep, payload = url[5:].partition(",")
        if not sep or not header.endswith(";base64"):
            raise ValueError("image data URL must be base64 encoded")
        media_type = header[: -len(";base64")] or "text/plain"
        try:
            return media_type, base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise ValueError(f"invalid base64 payload: {e}")
