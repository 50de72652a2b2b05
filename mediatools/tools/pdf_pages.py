"""PDF pages: rasterize every page of each document to PNG."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from ..core import DownloadArtifact, ExportEntry, MediaAsset
from ..core import pdf_loader
from ..core.errors import DecodeFailure
from ..core.packager import build_archive
from ..utils import file_tools, image_tools
from ..utils.handles import OwnedCollection, PreviewHandle

logger = logging.getLogger(__name__)

PdfOpener = Callable[[MediaAsset], pdf_loader.PdfDocumentReader]


@dataclass(eq=False)
class PdfPage:
    number: int
    data: bytes = field(repr=False)
    preview: PreviewHandle
    checked: bool = True

    def release(self) -> None:
        self.preview.release()


@dataclass(eq=False)
class PdfDocument:
    name: str
    pages: OwnedCollection[PdfPage]
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:9])

    @property
    def thumbnail(self) -> Optional[PreviewHandle]:
        return self.pages[0].preview if len(self.pages) else None

    def release(self) -> None:
        self.pages.clear()


class PdfSession:
    """Documents are all-or-nothing: one bad page discards the document and stops the batch."""

    def __init__(self, opener: PdfOpener = pdf_loader.open_pdf, scale: float = pdf_loader.DEFAULT_RENDER_SCALE):
        self.documents: OwnedCollection[PdfDocument] = OwnedCollection()
        self._opener = opener
        self.scale = scale

    def add_assets(self, assets: Iterable[MediaAsset]) -> list[PdfDocument]:
        """Load PDFs newest-first; a :class:`DecodeFailure` aborts the remaining batch."""

        added = []
        for asset in file_tools.filter_assets(assets, "pdf"):
            document = self._load(asset)
            self.documents.insert(0, document)
            added.append(document)
        return added

    def _load(self, asset: MediaAsset) -> PdfDocument:
        pages: OwnedCollection[PdfPage] = OwnedCollection()
        try:
            with self._opener(asset) as reader:
                total = reader.page_count
                for index in range(total):
                    logger.info("Rendering %s (%s/%s)", asset.name, index + 1, total)
                    source = reader.render_page(index, self.scale)
                    pages.append(
                        PdfPage(
                            number=index + 1,
                            data=image_tools.encode_image(source.image, "PNG"),
                            preview=PreviewHandle(image_tools.make_preview(source.image)),
                        )
                    )
        except DecodeFailure:
            pages.clear()
            logger.warning("Discarding %s: document could not be fully rendered", asset.name)
            raise
        return PdfDocument(name=asset.name, pages=pages)

    def toggle_page(self, document: PdfDocument, number: int, checked: bool) -> None:
        for page in document.pages:
            if page.number == number:
                page.checked = checked

    def toggle_all(self, document: PdfDocument, checked: bool) -> None:
        for page in document.pages:
            page.checked = checked

    def export(self, document: PdfDocument) -> Optional[DownloadArtifact]:
        entries = [ExportEntry(name=f"{page.number}.png", data=page.data) for page in document.pages if page.checked]
        if not entries:
            return None
        return build_archive(entries, f"{document.name}_images.zip")

    def remove(self, document: PdfDocument) -> None:
        self.documents.remove(document)

    def clear(self) -> None:
        self.documents.clear()
