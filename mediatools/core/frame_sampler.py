"""Time-domain sampling of video frames, one seek at a time."""

from __future__ import annotations

import asyncio
import logging
import math
import threading
from typing import Any, Callable, Optional, Protocol

from . import FrameInfo, RasterSource
from .errors import OperationCancelled, OperationTimedOut, ProcessingError

logger = logging.getLogger(__name__)


class FrameDecoder(Protocol):
    """One decode surface for one video; seeks must not overlap."""

    duration: float

    def frame_at(self, timestamp: float) -> RasterSource: ...

    def close(self) -> None: ...


class CancellationToken:
    """Flag checked between operations of a long batch."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled("Batch cancelled")


class ExclusiveDecoder:
    """Wrap a decoder so seeks never overlap and ``close`` never interrupts one.

    A seek abandoned by a timeout keeps running in its worker thread; a
    ``close`` requested meanwhile is carried out when that seek returns.
    """

    def __init__(self, decoder: FrameDecoder):
        self._decoder = decoder
        self.duration = decoder.duration
        self._state = threading.Lock()
        self._busy = False
        self._close_requested = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def frame_at(self, timestamp: float) -> RasterSource:
        with self._state:
            if self._busy or self._close_requested:
                raise ProcessingError("Decoder is busy or closed")
            self._busy = True
        try:
            return self._decoder.frame_at(timestamp)
        finally:
            with self._state:
                self._busy = False
                close_now = self._close_requested
            if close_now:
                self._shutdown()

    def close(self) -> None:
        with self._state:
            self._close_requested = True
            if self._busy:
                logger.debug("Deferring decoder close until the running seek returns")
                return
        self._shutdown()

    def _shutdown(self) -> None:
        with self._state:
            if self._closed:
                return
            self._closed = True
        self._decoder.close()


def compute_sample_times(duration: float) -> list[float]:
    """Roughly one sample per second, never at the very first or last instant.

    ``floor(duration)`` samples spaced ``duration / (count + 1)`` apart, so a
    5 second clip is sampled at 5/6, 10/6, ... 25/6 seconds. Clips shorter
    than a second, and unknown durations, yield no samples.
    """

    if not math.isfinite(duration) or duration <= 0:
        return []
    frame_count = math.floor(duration)
    interval = duration / (frame_count + 1)
    return [i * interval for i in range(1, frame_count + 1)]

async def sample_frames(
    decoder: FrameDecoder,
    *,
    timeout: Optional[float] = None,
    token: Optional[CancellationToken] = None,
) -> list[tuple[RasterSource, FrameInfo]]:
    """Sample every timestamp, awaiting each seek before issuing the next.

    Each seek runs in a worker thread; ``timeout`` bounds a single seek and
    raises :class:`OperationTimedOut`. The token is checked before every seek.
    """

    times = compute_sample_times(decoder.duration)
    logger.info("Extracting %s frames (%.2fs clip)", len(times), decoder.duration)
    results: list[tuple[RasterSource, FrameInfo]] = []
    for idx, ts in enumerate(times, start=1):
        if token is not None:
            token.raise_if_cancelled()
        frame = await run_with_timeout(decoder.frame_at, ts, timeout=timeout, operation=f"Seek to {ts:.3f}s")
        results.append((frame, FrameInfo(index=idx, timestamp=ts, width=frame.width, height=frame.height)))
    return results


async def run_with_timeout(
    func: Callable[..., Any],
    *args: Any,
    timeout: Optional[float] = None,
    operation: str = "Operation",
    on_abandoned: Optional[Callable[[Any], None]] = None,
) -> Any:
    """Run a blocking decode step off the event loop, bounded by ``timeout``.

    The worker thread cannot be interrupted. When the caller gives up on it,
    a result that arrives late is handed to ``on_abandoned`` so it can be
    released instead of leaking.
    """

    guard = threading.Lock()
    state: dict[str, Any] = {"abandoned": False, "finished": False, "result": None}

    def call():
        result = func(*args)
        with guard:
            abandoned = state["abandoned"]
            state["finished"], state["result"] = True, result
        if abandoned and on_abandoned is not None:
            on_abandoned(result)
        return result

    try:
        return await asyncio.wait_for(asyncio.to_thread(call), timeout=timeout)
    except asyncio.TimeoutError as exc:
        with guard:
            state["abandoned"] = True
            late = state["result"] if state["finished"] else None
            finished = state["finished"]
        if finished and on_abandoned is not None:
            on_abandoned(late)
        raise OperationTimedOut(operation, timeout or 0.0) from exc
