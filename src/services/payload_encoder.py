import base64
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path

import structlog

from src.core.exceptions import MalformedEncodingError

logger = structlog.get_logger()

_MIME_TYPE_RE = re.compile(r":(.*?);")

DEFAULT_MIME_TYPE = "application/octet-stream"

FORMAT_TO_MEDIA_TYPE = {
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


@dataclass(frozen=True)
class SourceFile:
    name: str
    mime_type: str
    content: bytes | None = None
    path: Path | None = None

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> "SourceFile":
        file_path = Path(path)
        if mime_type is None:
            mime_type = mimetypes.guess_type(file_path.name)[0] or DEFAULT_MIME_TYPE
        return cls(name=file_path.name, mime_type=mime_type, path=file_path)

    def read(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise OSError(f"No content available for {self.name!r}")
        return self.path.read_bytes()


@dataclass(frozen=True)
class EncodedPayload:
    mime_type: str
    data: str


def _detect_image_format(image_bytes: bytes) -> str | None:
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "png"
    if image_bytes[:2] == b"\xff\xd8":
        return "jpeg"
    if image_bytes[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "webp"
    return None


def detect_mime_type(image_bytes: bytes) -> str | None:
    fmt = _detect_image_format(image_bytes)
    if fmt is None:
        return None
    return FORMAT_TO_MEDIA_TYPE[fmt]


def to_data_url(mime_type: str, data: str) -> str:
    return f"data:{mime_type};base64,{data}"


def read_as_data_url(source: SourceFile) -> str:
    """Read the whole file and render it as ``data:<mime>;base64,<payload>``."""
    try:
        content = source.read()
    except OSError as e:
        logger.error("source_read_failed", name=source.name, error=str(e))
        raise MalformedEncodingError("Failed to read file as data URL.") from e
    return to_data_url(source.mime_type, base64.b64encode(content).decode())


def parse_data_url(data_url: str) -> EncodedPayload:
    """Split a data URL into its MIME type and base-64 payload.

    The header is everything before the first comma; the MIME type is the
    text between ``:`` and the first following ``;``. Raises
    MalformedEncodingError naming the stage that failed.
    """
    header, _, data = data_url.partition(",")
    if not header or not data:
        raise MalformedEncodingError("Invalid data URL format.")

    match = _MIME_TYPE_RE.search(header)
    if not match or not match.group(1):
        raise MalformedEncodingError("Could not extract MIME type from data URL.")

    return EncodedPayload(mime_type=match.group(1), data=data)


def file_to_generative_part(source: SourceFile) -> EncodedPayload:
    return parse_data_url(read_as_data_url(source))
