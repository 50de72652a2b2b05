"""Filesystem and filename helpers."""

from __future__ import annotations

import logging
import mimetypes
import re
from pathlib import Path
from typing import Iterable, Optional

from ..core import DownloadArtifact, MediaAsset
from . import validators

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|]')


def ensure_directory(path: Path) -> Path:
    """Create a directory if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)
    return path


def sanitize_filename(name: str) -> str:
    """Whitespace runs become ``_``; characters illegal in filenames are dropped."""

    return _UNSAFE_CHARS.sub("", re.sub(r"\s+", "_", name))


def split_filename(filename: str) -> tuple[str, str]:
    """Split at the last dot; the extension keeps its dot."""

    dot = filename.rfind(".")
    if dot == -1:
        return filename, ""
    return filename[:dot], filename[dot:]


def asset_from_path(path: Path, max_bytes: Optional[int] = None) -> MediaAsset:
    """Read a file into a :class:`MediaAsset`, declaring its MIME type from the extension."""

    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    asset = MediaAsset(name=path.name, data=path.read_bytes(), mime=mime)
    return validators.validate_asset_size(asset, max_bytes)


def filter_assets(assets: Iterable[MediaAsset], category: str) -> list[MediaAsset]:
    """Keep assets of one category; others are dropped silently."""

    kept = [asset for asset in assets if validators.matches_category(asset.mime, category)]
    logger.debug("Kept %s %s assets", len(kept), category)
    return kept


def write_artifact(artifact: DownloadArtifact, directory: Path) -> Path:
    """Persist a download next to other outputs."""

    target = ensure_directory(directory) / artifact.filename
    target.write_bytes(artifact.data)
    logger.info("Wrote %s", target)
    return target
