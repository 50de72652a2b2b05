"""Image splitter: cut each selected image into a grid of tiles."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..core import AssetReport, AssetStatus, DownloadArtifact, ExportEntry, MediaAsset, RasterSource
from ..core.compositor import render_grid_tiles
from ..core.errors import DecodeFailure
from ..core.layout import compute_grid_partition
from ..core.packager import build_archive
from ..settings import SplitRequest
from ..utils import file_tools, image_tools
from ..utils.handles import OwnedCollection, PreviewHandle

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "split_images.zip"


@dataclass(eq=False)
class SplitItem:
    asset: MediaAsset
    source: Optional[RasterSource] = None
    preview: Optional[PreviewHandle] = None
    checked: bool = True
    tiles: list[bytes] = field(default_factory=list)
    status: AssetStatus = AssetStatus.PENDING
    error: Optional[str] = None
    output_extension: Optional[str] = None

    @property
    def extension(self) -> str:
        if self.output_extension:
            return self.output_extension
        return file_tools.split_filename(self.asset.name)[1].lstrip(".") or "png"

    def release(self) -> None:
        if self.preview is not None:
            self.preview.release()


class SplitterSession:
    def __init__(self, settings: Optional[SplitRequest] = None):
        self.items: OwnedCollection[SplitItem] = OwnedCollection()
        self.settings = settings or SplitRequest()

    def add_assets(self, assets: Iterable[MediaAsset]) -> list[AssetReport]:
        """Decode image assets; anything that is not an image is ignored."""

        reports = []
        for asset in file_tools.filter_assets(assets, "image"):
            try:
                source = image_tools.decode_image(asset)
            except DecodeFailure as exc:
                logger.warning("%s", exc)
                self.items.append(SplitItem(asset=asset, status=AssetStatus.FAILED, error=str(exc)))
                reports.append(AssetReport(asset.name, AssetStatus.FAILED, str(exc)))
                continue
            preview = PreviewHandle(image_tools.make_preview(source.image))
            self.items.append(SplitItem(asset=asset, source=source, preview=preview))
            reports.append(AssetReport(asset.name, AssetStatus.PENDING))
        return reports

    def update_settings(self, settings: SplitRequest) -> None:
        self.settings = settings

    def process(self) -> int:
        """Split every checked, decodable item; returns the number of tiles produced."""

        spec = self.settings.to_spec()
        produced = 0
        for item in self.items:
            if not item.checked or item.source is None:
                continue
            partition = compute_grid_partition(item.source.width, item.source.height, spec)
            tiles = render_grid_tiles(item.source, partition)
            item.output_extension = None
            fmt = item.source.format or image_tools.format_for_extension(item.extension)
            try:
                item.tiles = [image_tools.encode_image(tile, fmt) for tile in tiles]
            except (OSError, ValueError, KeyError) as exc:
                logger.warning("Cannot write %s tiles for %s (%s); saving PNG instead", fmt, item.asset.name, exc)
                item.tiles = [image_tools.encode_image(tile, "PNG") for tile in tiles]
                item.output_extension = "png"
            item.status = AssetStatus.DONE
            produced += len(item.tiles)
            logger.info("Split %s into %s tiles", item.asset.name, len(item.tiles))
        return produced

    def export(self) -> Optional[DownloadArtifact]:
        """Number tiles ``1.ext``, ``2.ext``, ... across all checked items."""

        entries = []
        for item in self.items:
            if not item.checked:
                continue
            for tile in item.tiles:
                entries.append(ExportEntry(name=f"{len(entries) + 1}.{item.extension}", data=tile))
        return build_archive(entries, ARCHIVE_NAME)

    def remove(self, item: SplitItem) -> None:
        self.items.remove(item)

    def clear(self) -> None:
        self.items.clear()
