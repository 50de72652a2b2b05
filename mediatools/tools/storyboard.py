"""Storyboard boards: ordered images rendered as a contact sheet."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from ..core import AssetReport, AssetStatus, DownloadArtifact, ExportEntry, MediaAsset, RasterSource, StoryboardProject
from ..core import video_loader
from ..core.compositor import render_contact_sheet
from ..core.errors import DecodeFailure, RenderSurfaceUnavailable
from ..core.packager import build_archive, package_single
from ..settings import StoryboardRequest
from ..utils import file_tools, image_tools, validators
from ..utils.handles import OwnedCollection, PreviewHandle

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "storyboards.zip"
JPEG_QUALITY = 90

FrameGrabber = Callable[[MediaAsset], RasterSource]


@dataclass(eq=False)
class StoryImage:
    name: str
    source: RasterSource
    preview: PreviewHandle

    def release(self) -> None:
        self.preview.release()


@dataclass(frozen=True)
class BoardRender:
    data: bytes
    width: int
    height: int


class StoryBoard:
    """One storyboard project and the resources its images hold."""

    def __init__(self, board_id: int, name: str):
        self.id = board_id
        self.name = name
        self.images: OwnedCollection[StoryImage] = OwnedCollection()
        self.options = StoryboardRequest()
        self.last_rendered: Optional[bytes] = None
        self.dimensions = (0, 0)

    @property
    def project(self) -> StoryboardProject:
        base = StoryboardProject(
            name=self.name,
            images=tuple(image.source for image in self.images),
            last_rendered=self.last_rendered,
        )
        return self.options.apply(base)

    def release(self) -> None:
        self.images.clear()
        self.last_rendered = None


def render_project(project: StoryboardProject) -> Optional[BoardRender]:
    """Render a project to JPEG on its own surface; ``None`` when there is nothing to draw."""

    try:
        sheet = render_contact_sheet(project.images, project.sheet_spec)
    except RenderSurfaceUnavailable as exc:
        logger.debug("Storyboard %s not rendered: %s", project.name, exc)
        return None
    if sheet is None:
        return None
    width, height = sheet.size
    return BoardRender(image_tools.encode_image(sheet.image, "JPEG", quality=JPEG_QUALITY), width, height)


class StoryboardSession:
    def __init__(self, frame_grabber: FrameGrabber = video_loader.grab_frame):
        self.boards: OwnedCollection[StoryBoard] = OwnedCollection()
        self._frame_grabber = frame_grabber
        self._next_id = 1
        self.active = self.new_board()

    def new_board(self) -> StoryBoard:
        board = StoryBoard(self._next_id, f"Board_{len(self.boards) + 1}")
        self._next_id += 1
        self.boards.append(board)
        self.active = board
        return board

    def activate(self, board_id: int) -> StoryBoard:
        self.active = self._board(board_id)
        return self.active

    def delete_board(self, board_id: int) -> bool:
        """Remove a board and release its images; the last board is never removed."""

        if len(self.boards) <= 1:
            return False
        board = self._board(board_id)
        self.boards.remove(board)
        if self.active is board:
            self.active = self.boards[0]
        return True

    def rename(self, name: str) -> None:
        cleaned = file_tools.sanitize_filename(name)
        if cleaned:
            self.active.name = cleaned

    def configure(self, options: StoryboardRequest) -> None:
        self.active.options = options
        self.render()

    def add_assets(self, assets: Iterable[MediaAsset]) -> list[AssetReport]:
        """Append images, and one representative frame per video, to the active board."""

        reports = []
        for asset in assets:
            try:
                if validators.matches_category(asset.mime, "image"):
                    source = image_tools.decode_image(asset)
                elif validators.matches_category(asset.mime, "video"):
                    source = self._frame_grabber(asset)
                else:
                    continue
            except DecodeFailure as exc:
                logger.warning("%s", exc)
                reports.append(AssetReport(asset.name, AssetStatus.FAILED, str(exc)))
                continue
            preview = PreviewHandle(image_tools.make_preview(source.image))
            self.active.images.append(StoryImage(name=asset.name, source=source, preview=preview))
            reports.append(AssetReport(asset.name, AssetStatus.DONE))
        self.render()
        return reports

    def move_image(self, index: int, step: int) -> bool:
        moved = self.active.images.move(index, step)
        if moved:
            self.render()
        return moved

    def remove_image(self, index: int) -> None:
        self.active.images.pop(index)
        self.render()

    def clear(self) -> None:
        self.active.release()
        self.active.dimensions = (0, 0)

    def render(self, board: Optional[StoryBoard] = None) -> Optional[BoardRender]:
        """Re-render a board from its current images and options."""

        board = board or self.active
        result = render_project(board.project)
        board.last_rendered = result.data if result else None
        board.dimensions = (result.width, result.height) if result else (0, 0)
        return result

    def download_current(self) -> Optional[DownloadArtifact]:
        result = self.render()
        if result is None:
            return None
        return package_single(ExportEntry(name=f"{self.active.name}.jpg", data=result.data))

    def export_all(self) -> Optional[DownloadArtifact]:
        """Render every non-empty board afresh and bundle them."""

        entries = []
        for board in self.boards:
            result = self.render(board)
            if result is not None:
                entries.append(ExportEntry(name=f"{board.name}.jpg", data=result.data))
        return build_archive(entries, ARCHIVE_NAME)

    def _board(self, board_id: int) -> StoryBoard:
        for board in self.boards:
            if board.id == board_id:
                return board
        raise KeyError(board_id)
