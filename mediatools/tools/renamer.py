"""Batch renamer: derive new names for arbitrary files and bundle them."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..core import DownloadArtifact, ExportEntry, MediaAsset, RenameRuleSet
from ..core.packager import build_archive
from ..core.rename import RenameSubject, derive_all
from ..utils import file_tools

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "renamed_files.zip"


@dataclass(eq=False)
class RenameItem:
    original_base: str
    extension: str
    data: bytes = field(repr=False)
    index: int = 0
    new_name: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:9])

    @property
    def original_name(self) -> str:
        return self.original_base + self.extension

    @property
    def subject(self) -> RenameSubject:
        return RenameSubject(self.original_base, self.extension, self.index)


class RenamerSession:
    """Items keep the position they were added at; removing one never renumbers the rest."""

    def __init__(self, rules: Optional[RenameRuleSet] = None):
        self.items: list[RenameItem] = []
        self._rules = rules or RenameRuleSet()
        self._next_index = 0

    @property
    def rules(self) -> RenameRuleSet:
        return self._rules

    def set_rules(self, rules: RenameRuleSet) -> None:
        self._rules = rules
        self._rederive()

    def add_assets(self, assets: Iterable[MediaAsset]) -> list[RenameItem]:
        added = []
        for asset in assets:
            base, ext = file_tools.split_filename(asset.name)
            item = RenameItem(original_base=base, extension=ext, data=asset.data, index=self._next_index)
            self._next_index += 1
            self.items.append(item)
            added.append(item)
        self._rederive()
        return added

    def remove(self, item: RenameItem) -> None:
        self.items.remove(item)

    def clear(self) -> None:
        self.items = []
        self._next_index = 0

    def preview(self) -> list[tuple[str, str]]:
        return [(item.original_name, item.new_name) for item in self.items]

    def export(self) -> Optional[DownloadArtifact]:
        entries = [ExportEntry(name=item.new_name, data=item.data) for item in self.items]
        return build_archive(entries, ARCHIVE_NAME)

    def _rederive(self) -> None:
        names = derive_all((item.subject for item in self.items), self._rules)
        for item, name in zip(self.items, names):
            item.new_name = name
        logger.debug("Derived %s names", len(names))
