"""Video decoding and seeking backed by moviepy."""

from __future__ import annotations

import logging
import mimetypes
import tempfile
from pathlib import Path

import numpy as np
from PIL import Image

from . import MediaAsset, RasterSource, VideoMetadata
from .errors import DecodeFailure, ProcessingError

logger = logging.getLogger(__name__)

STORYBOARD_FRAME_SECONDS = 1.0


class MoviePyDecoder:
    """A single decode surface for one video asset.

    moviepy reads from disk, so the asset bytes are spooled into a temporary
    file that lives exactly as long as the decoder.
    """

    def __init__(self, asset: MediaAsset):
        _ensure_ffmpeg_available()
        clip_class = _resolve_video_file_clip()

        self.name = asset.name
        suffix = Path(asset.name).suffix or mimetypes.guess_extension(asset.mime) or ".mp4"
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as handle:
            handle.write(asset.data)
        self._path = Path(handle.name)
        try:
            self._clip = clip_class(str(self._path))
        except Exception as exc:  # pragma: no cover - backend dependent
            self._path.unlink(missing_ok=True)
            raise DecodeFailure(asset.name, reason=f"Could not read metadata: {exc}") from exc

        width, height = self._clip.size
        self.metadata = VideoMetadata(
            width=width,
            height=height,
            fps=float(getattr(self._clip, "fps", 24.0) or 24.0),
            duration_seconds=float(getattr(self._clip, "duration", 0.0) or 0.0),
        )
        self.duration = self.metadata.duration_seconds
        logger.debug(
            "Opened %s -> %sx%s @ %sfps, %ss",
            asset.name,
            width,
            height,
            self.metadata.fps,
            self.duration,
        )

    def frame_at(self, timestamp: float) -> RasterSource:
        """Seek to ``timestamp`` (clamped into the clip) and capture the frame."""

        ts = min(max(timestamp, 0.0), max(self.duration - 0.001, 0.0))
        try:
            frame_array = self._clip.get_frame(ts)
        except Exception as exc:  # pragma: no cover - moviepy internals
            raise DecodeFailure(self.name, reason=f"Failed to decode frame at {ts:.3f}s: {exc}") from exc
        image = Image.fromarray(np.asarray(frame_array, dtype=np.uint8))
        return RasterSource.from_image(image)

    def close(self) -> None:
        try:
            self._clip.close()
        finally:
            self._path.unlink(missing_ok=True)

    def __enter__(self) -> "MoviePyDecoder":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_decoder(asset: MediaAsset) -> MoviePyDecoder:
    """Open ``asset`` for sequential seeking."""

    return MoviePyDecoder(asset)


def grab_frame(asset: MediaAsset, timestamp: float = STORYBOARD_FRAME_SECONDS) -> RasterSource:
    """Decode a single representative frame, used when videos join a storyboard."""

    with open_decoder(asset) as decoder:
        return decoder.frame_at(timestamp)


def _ensure_ffmpeg_available() -> None:
    """Raise a friendly error if ffmpeg is missing."""

    try:
        from moviepy.config import FFMPEG_BINARY  # type: ignore
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise ProcessingError("moviepy is not installed. Run pip install -e .") from exc

    if not FFMPEG_BINARY:
        raise ProcessingError("ffmpeg not found. Install ffmpeg and ensure it is on PATH.")


def _resolve_video_file_clip():
    """Import VideoFileClip from supported moviepy locations."""

    try:
        from moviepy import VideoFileClip  # type: ignore
        return VideoFileClip
    except ImportError:
        try:
            from moviepy.editor import VideoFileClip  # type: ignore
            return VideoFileClip
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise ProcessingError("moviepy is not installed. Run pip install -e .") from exc
