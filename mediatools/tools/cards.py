"""Logo cards: a fitted image plus an optional caption on a fixed canvas."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..core import AssetReport, AssetStatus, CardStyle, CompositionCard, DownloadArtifact, ExportEntry, MediaAsset
from ..core.compositor import render_card
from ..core.errors import DecodeFailure, RenderSurfaceUnavailable
from ..core.packager import build_archive, package_single
from ..settings import CardComposerRequest, CardOverrideRequest
from ..utils import file_tools, image_tools
from ..utils.handles import OwnedCollection, PreviewHandle

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "logos.zip"
DEFAULT_TEXT_ANCHOR = 90.0


@dataclass(eq=False)
class CardItem:
    card: CompositionCard
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:9])
    preview: Optional[PreviewHandle] = None

    def release(self) -> None:
        if self.preview is not None:
            self.preview.release()
            self.preview = None


class CardSession:
    def __init__(self, settings: Optional[CardComposerRequest] = None):
        self.cards: OwnedCollection[CardItem] = OwnedCollection()
        self.settings = settings or CardComposerRequest()

    @property
    def style(self) -> CardStyle:
        return self.settings.to_style()

    def add_assets(self, assets: Iterable[MediaAsset]) -> list[AssetReport]:
        reports = []
        style = self.style
        for asset in file_tools.filter_assets(assets, "image"):
            try:
                source = image_tools.decode_image(asset)
            except DecodeFailure as exc:
                logger.warning("%s", exc)
                reports.append(AssetReport(asset.name, AssetStatus.FAILED, str(exc)))
                continue
            card = CompositionCard(
                source=source,
                filename=file_tools.sanitize_filename(asset.name.split(".")[0]),
                text_anchor_percent=DEFAULT_TEXT_ANCHOR,
                image_offset_percent=style.image_offset_percent,
            )
            item = CardItem(card=card)
            self._refresh_preview(item)
            self.cards.append(item)
            reports.append(AssetReport(asset.name, AssetStatus.DONE))
        return reports

    def update_settings(self, settings: CardComposerRequest) -> None:
        """Replace the shared settings and re-render every card."""

        self.settings = settings
        for item in self.cards:
            self._refresh_preview(item)

    def edit(self, item: CardItem, overrides: CardOverrideRequest) -> CompositionCard:
        """Apply per-card edits; changing the text also renames the card."""

        changes: dict[str, object] = {}
        if overrides.text is not None:
            changes["text"] = overrides.text
            changes["filename"] = file_tools.sanitize_filename(overrides.text) or item.card.filename
        if overrides.filename is not None:
            changes["filename"] = file_tools.sanitize_filename(overrides.filename)
        if overrides.font_size_override is not None:
            changes["font_size_override"] = overrides.font_size_override
        elif overrides.clear_font_size:
            changes["font_size_override"] = None
        if overrides.text_y_percent is not None:
            changes["text_anchor_percent"] = overrides.text_y_percent
        if overrides.img_y_percent is not None:
            changes["image_offset_percent"] = overrides.img_y_percent
        item.card = dataclasses.replace(item.card, **changes)
        self._refresh_preview(item)
        return item.card

    def render(self, item: CardItem) -> Optional[bytes]:
        """PNG bytes of the card, or ``None`` when no surface could be acquired."""

        try:
            return image_tools.encode_image(render_card(item.card, self.style), "PNG")
        except RenderSurfaceUnavailable as exc:
            logger.debug("Card %s not rendered: %s", item.card.filename, exc)
            return None

    def download(self, item: CardItem) -> Optional[DownloadArtifact]:
        data = self.render(item)
        if data is None:
            return None
        return package_single(ExportEntry(name=f"{item.card.filename}.png", data=data))

    def export_all(self) -> Optional[DownloadArtifact]:
        """Bundle every card; duplicate filenames get ``_1``, ``_2``, ... suffixes."""

        entries = []
        for item in self.cards:
            data = self.render(item)
            if data is not None:
                entries.append(ExportEntry(name=f"{item.card.filename}.png", data=data))
        return build_archive(entries, ARCHIVE_NAME)

    def remove(self, item: CardItem) -> None:
        self.cards.remove(item)

    def clear(self) -> None:
        self.cards.clear()

    def _refresh_preview(self, item: CardItem) -> None:
        item.release()
        try:
            image = render_card(item.card, self.style)
        except RenderSurfaceUnavailable as exc:
            logger.debug("No preview for %s: %s", item.card.filename, exc)
            return
        item.preview = PreviewHandle(image_tools.make_preview(image))
