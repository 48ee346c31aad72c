import base64
import binascii
import mimetypes
import re
from dataclasses import dataclass
from typing import Optional

from ..errors import ValidationError

_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[A-Za-z0-9.+-]+/[A-Za-z0-9.+-]+)(?:;[^;,]+=[^;,]*)*;base64,(?P<data>.*)$",
    re.S,
)


@dataclass(frozen=True)
class ImagePayload:
    """
    An encoded image: `data:<mime>;base64,<data>`.
    Build with `parse()` or `from_bytes()`; both reject malformed input.
    """
    mime_type: str
    data: bytes

    @classmethod
    def parse(cls, data_uri: Optional[str]) -> "ImagePayload":
        if not isinstance(data_uri, str) or not data_uri.strip():
            raise ValidationError("Image payload is empty.")
        m = _DATA_URI_RE.match(data_uri.strip())
        if not m:
            raise ValidationError(
                "Image payload must be a data URI of the form 'data:<mimetype>;base64,<encoded_data>'."
            )
        mime = m.group("mime").lower()
        body = "".join(m.group("data").split())
        try:
            raw = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(f"Image payload is not valid Base64: {e}") from e
        return cls.from_bytes(raw, mime)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: Optional[str] = None, filename: Optional[str] = None) -> "ImagePayload":
        mime = (mime_type or "").strip().lower()
        if not mime and filename:
            mime = mimetypes.guess_type(filename)[0] or ""
        if not mime:
            raise ValidationError("Image payload has no MIME type.")
        if not mime.startswith("image/"):
            raise ValidationError(f"Unsupported MIME type '{mime}'; an image is required.")
        if not data:
            raise ValidationError("Image payload has no data.")
        return cls(mime_type=mime, data=bytes(data))

    @property
    def b64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.b64}"

    def inline_part(self) -> dict:
        """ADK message part carrying the image inline."""
        return {"inlineData": {"mimeType": self.mime_type, "data": self.b64}}

    def __repr__(self) -> str:
        return f"ImagePayload(mime_type={self.mime_type!r}, size={len(self.data)})"
