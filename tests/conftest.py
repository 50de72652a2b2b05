from io import BytesIO

import pytest
from PIL import Image

from mediatools.core import MediaAsset, RasterSource


def encode(image, fmt="PNG"):
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    def _make(size=(40, 30), color=(255, 0, 0)):
        return Image.new("RGB", size, color)

    return _make


@pytest.fixture
def make_source(make_image):
    def _make(size=(40, 30), color=(255, 0, 0)):
        return RasterSource.from_image(make_image(size, color))

    return _make


@pytest.fixture
def image_asset(make_image):
    def _make(name="logo.png", size=(40, 30), color=(255, 0, 0)):
        fmt = "JPEG" if name.lower().endswith((".jpg", ".jpeg")) else "PNG"
        mime = "image/jpeg" if fmt == "JPEG" else "image/png"
        return MediaAsset(name=name, data=encode(make_image(size, color), fmt), mime=mime)

    return _make


@pytest.fixture
def pdf_asset():
    fitz = pytest.importorskip("fitz")

    def _make(name="doc.pdf", pages=2):
        doc = fitz.open()
        for _ in range(pages):
            doc.new_page(width=72, height=36)
        data = doc.tobytes()
        doc.close()
        return MediaAsset(name=name, data=data, mime="application/pdf")

    return _make


class FakeDecoder:
    """In-memory decoder producing solid frames, recording every seek."""

    def __init__(self, duration, size=(16, 9), on_seek=None):
        self.duration = duration
        self.size = size
        self.seeks = []
        self.closed = False
        self.seeking = False
        self.closed_while_seeking = False
        self._on_seek = on_seek

    def frame_at(self, timestamp):
        self.seeks.append(timestamp)
        self.seeking = True
        try:
            if self._on_seek is not None:
                self._on_seek(timestamp)
        finally:
            self.seeking = False
        return RasterSource.from_image(Image.new("RGB", self.size, (0, 128, 255)))

    def close(self):
        self.closed_while_seeking = self.closed_while_seeking or self.seeking
        self.closed = True


@pytest.fixture
def fake_decoder():
    return FakeDecoder
