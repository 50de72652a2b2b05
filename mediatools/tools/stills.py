"""Video stills: sample about one frame per second from each video."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from ..core import AssetReport, AssetStatus, DownloadArtifact, ExportEntry, MediaAsset
from ..core import video_loader
from ..core.errors import DecodeFailure, OperationTimedOut
from ..core.frame_sampler import (
    CancellationToken,
    ExclusiveDecoder,
    FrameDecoder,
    run_with_timeout,
    sample_frames,
)
from ..core.packager import build_archive
from ..utils import file_tools, image_tools
from ..utils.handles import OwnedCollection, PreviewHandle

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "video_stills.zip"
JPEG_QUALITY = 85

DecoderFactory = Callable[[MediaAsset], FrameDecoder]


def _close_late_decoder(decoder: FrameDecoder) -> None:
    logger.debug("Closing decoder that opened after its timeout")
    decoder.close()


@dataclass(eq=False)
class StillFrame:
    number: int
    timestamp: float
    data: bytes = field(repr=False)
    preview: PreviewHandle
    checked: bool = True

    def release(self) -> None:
        self.preview.release()


@dataclass(eq=False)
class VideoItem:
    asset: MediaAsset
    name: str
    frames: OwnedCollection[StillFrame] = field(default_factory=OwnedCollection)
    processed: bool = False
    status: AssetStatus = AssetStatus.PENDING
    error: Optional[str] = None

    def release(self) -> None:
        self.frames.clear()


class VideoStillsSession:
    def __init__(self, decoder_factory: DecoderFactory = video_loader.open_decoder, timeout: Optional[float] = None):
        self.videos: OwnedCollection[VideoItem] = OwnedCollection()
        self._decoder_factory = decoder_factory
        self.timeout = timeout

    def add_assets(self, assets: Iterable[MediaAsset]) -> list[VideoItem]:
        added = []
        for asset in file_tools.filter_assets(assets, "video"):
            name = file_tools.sanitize_filename(re.sub(r"\.[^/.]+$", "", asset.name))
            item = VideoItem(asset=asset, name=name)
            self.videos.append(item)
            added.append(item)
        return added

    async def process_videos(self, token: Optional[CancellationToken] = None) -> list[AssetReport]:
        """Sample every unprocessed video, one after another.

        A video that fails to decode or times out is reported and skipped;
        the others still run. Cancellation stops the batch between seeks and
        leaves completed videos intact.
        """

        reports = []
        for video in self.videos:
            if video.processed:
                continue
            if token is not None:
                token.raise_if_cancelled()
            try:
                await self._sample(video, token)
            except DecodeFailure as exc:
                logger.warning("%s", exc)
                video.status, video.error = AssetStatus.FAILED, str(exc)
            except OperationTimedOut as exc:
                logger.warning("%s: %s", video.name, exc)
                video.status, video.error = AssetStatus.TIMED_OUT, str(exc)
            else:
                video.processed = True
                video.status, video.error = AssetStatus.DONE, None
            reports.append(AssetReport(video.asset.name, video.status, video.error))
        return reports

    async def _sample(self, video: VideoItem, token: Optional[CancellationToken]) -> None:
        opened = await run_with_timeout(
            self._decoder_factory,
            video.asset,
            timeout=self.timeout,
            operation=f"Open {video.name}",
            on_abandoned=_close_late_decoder,
        )
        decoder = ExclusiveDecoder(opened)
        try:
            samples = await sample_frames(decoder, timeout=self.timeout, token=token)
        finally:
            decoder.close()
        video.frames.clear()
        for source, info in samples:
            video.frames.append(
                StillFrame(
                    number=info.index,
                    timestamp=info.timestamp,
                    data=image_tools.encode_image(source.image, "JPEG", quality=JPEG_QUALITY),
                    preview=PreviewHandle(image_tools.make_preview(source.image)),
                )
            )
        logger.info("Captured %s stills from %s", len(samples), video.name)

    def set_frame_checked(self, video: VideoItem, number: int, checked: bool) -> None:
        for frame in video.frames:
            if frame.number == number:
                frame.checked = checked

    def export(self) -> Optional[DownloadArtifact]:
        """One folder per video, frames named by their sample number."""

        entries = [
            ExportEntry(name=f"{video.name}/{frame.number}.jpg", data=frame.data)
            for video in self.videos
            for frame in video.frames
            if frame.checked
        ]
        return build_archive(entries, ARCHIVE_NAME)

    def remove(self, video: VideoItem) -> None:
        self.videos.remove(video)

    def clear(self) -> None:
        self.videos.clear()
