"""
Object storage for uploaded images.

Files are written under MEDIA_ROOT and served back from MEDIA_URL.
"""

import asyncio
import re
from pathlib import Path

from ideation.config import settings

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def _safe_name(name: str) -> str:
    cleaned = _UNSAFE.sub("_", name.strip()) or "upload"
    return cleaned.lstrip(".") or "upload"


def storage_path(*parts: str) -> str:
    """Join path segments, each reduced to a safe file name."""
    return "/".join(_safe_name(part) for part in parts)


def public_url(path: str) -> str:
    return f"{settings.MEDIA_URL.rstrip('/')}/{path}"


def _write(path: str, data: bytes) -> None:
    target = Path(settings.MEDIA_ROOT) / path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


async def upload(path: str, data: bytes) -> str:
    """Store ``data`` at ``path`` and return its public URL."""
    await asyncio.to_thread(_write, path, data)
    return public_url(path)
