"""
Collision-free naming and ZIP assembly for export flows.

Archive layout mirrors entry names: ``clip/03.jpg`` lands in a ``clip/``
directory. Entries are written with a fixed timestamp so identical inputs
produce identical archive bytes.
"""

from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from typing import Iterable, Optional, Sequence

from . import DownloadArtifact, ExportEntry
from .errors import NameCollisionExhausted

logger = logging.getLogger(__name__)

MAX_COLLISION_ATTEMPTS = 100_000
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def split_entry_name(name: str) -> tuple[str, str]:
    """Split ``name`` into stem and extension, looking only at the last path segment."""

    directory, sep, base = name.rpartition("/")
    dot = base.rfind(".")
    if dot <= 0:
        return name, ""
    return f"{directory}{sep}{base[:dot]}", base[dot:]


class NameRegistry:
    """Names already emitted by one export call."""

    def __init__(self, max_attempts: int = MAX_COLLISION_ATTEMPTS):
        self.used: set[str] = set()
        self.max_attempts = max_attempts

    def claim(self, name: str) -> str:
        """Reserve ``name``, or ``stem_N.ext`` with the smallest free ``N >= 1``."""

        if name not in self.used:
            self.used.add(name)
            return name
        stem, ext = split_entry_name(name)
        for counter in range(1, self.max_attempts + 1):
            candidate = f"{stem}_{counter}{ext}"
            if candidate not in self.used:
                self.used.add(candidate)
                return candidate
        raise NameCollisionExhausted(f"No free name for {name} after {self.max_attempts} attempts")


def resolve_names(entries: Iterable[ExportEntry]) -> list[ExportEntry]:
    """Return the entries renamed so that every name is distinct, order preserved."""

    registry = NameRegistry()
    return [ExportEntry(name=registry.claim(entry.name), data=entry.data) for entry in entries]


def package_single(entry: ExportEntry) -> DownloadArtifact:
    """Single-item download: the payload goes out as-is under its own name."""

    return DownloadArtifact(filename=entry.name, data=entry.data)


def build_archive(entries: Sequence[ExportEntry], archive_name: str) -> Optional[DownloadArtifact]:
    """Bundle ``entries`` into one ZIP; ``None`` when there is nothing to export."""

    if not entries:
        logger.debug("Nothing to package for %s", archive_name)
        return None
    resolved = resolve_names(entries)
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for entry in resolved:
            info = zipfile.ZipInfo(entry.name, date_time=_ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            zf.writestr(info, entry.data)
    logger.info("Packaged %s entries into %s", len(resolved), archive_name)
    return DownloadArtifact(
        filename=archive_name,
        data=buffer.getvalue(),
        entries=tuple(entry.name for entry in resolved),
    )
