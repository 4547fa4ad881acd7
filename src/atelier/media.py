"""Data URI helpers and on-disk media handling."""

import base64
import re
import shutil
import tempfile
import time
import unicodedata
from pathlib import Path

from .models import VideoResult

_DATA_URI_PREFIX = re.compile(r"^data:[\w/+.-]+;base64,")


def to_data_uri(data: bytes | str, mime_type: str = "image/png") -> str:
    """Wrap media in a data URI. Strings are assumed to be base64 already."""
    if isinstance(data, bytes):
        data = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{data}"


def strip_data_uri(data_uri: str) -> str:
    """Return the base64 payload of a data URI (or the input if it has no prefix)."""
    return _DATA_URI_PREFIX.sub("", data_uri, count=1)


def decode_data_uri(data_uri: str) -> bytes:
    return base64.b64decode(strip_data_uri(data_uri))


def part_bytes(data: bytes | str) -> bytes:
    """Inline part payloads arrive as raw bytes or as base64 text."""
    if isinstance(data, str):
        return base64.b64decode(data)
    return data


def slugify(name: str) -> str:
    normalized = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    slug = re.sub(r"[^a-zA-Z0-9]+", "-", normalized).strip("-").lower()
    return slug or "atelier"


def session_media_dir(media_dir: Path | None) -> Path:
    """Directory holding this session's generated media."""
    if media_dir is None:
        return Path(tempfile.mkdtemp(prefix="atelier-"))
    media_dir.mkdir(parents=True, exist_ok=True)
    return media_dir


def write_media(data: bytes, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        f.write(data)
    return output_path


def save_image(
    data_uri: str,
    output_dir: Path,
    brand_name: str,
    timestamp: int | None = None,
) -> Path:
    """Download a generated still as ``{brand}-{timestamp}.png``."""
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return write_media(
        decode_data_uri(data_uri),
        output_dir / f"{slugify(brand_name)}-{timestamp}.png",
    )


def export_video(result: VideoResult, output_dir: Path, brand_name: str) -> Path:
    """Copy a generated video out of the session directory as an MP4."""
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / f"video-{slugify(brand_name)}.mp4"
    shutil.copyfile(result.path, target)
    return target


def export_narration(path: Path, output_dir: Path, brand_name: str) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / f"narracao-{slugify(brand_name)}.wav"
    shutil.copyfile(path, target)
    return target
