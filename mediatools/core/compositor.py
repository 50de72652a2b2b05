"""Rasterization of layouts onto explicitly owned render targets using Pillow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence, Union

from PIL import Image, ImageDraw, ImageFont

from . import CardStyle, CompositionCard, ContactSheetLayout, ContactSheetSpec, GridPartition, RasterSource, Tile
from .errors import RenderSurfaceUnavailable
from .layout import card_image_placement, compute_contact_sheet_layout, crop_to_fill, text_baselines

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)
FONT_CANDIDATES = {
    False: ("Inter-Regular.ttf", "Inter.ttf", "DejaVuSans.ttf", "Arial.ttf"),
    True: ("Inter-Bold.ttf", "DejaVuSans-Bold.ttf", "Arial Bold.ttf"),
}

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


class RenderTarget:
    """A drawing surface owned by exactly one render call."""

    def __init__(self, image: Image.Image):
        self.image = image

    @classmethod
    def acquire(cls, width: float, height: float, background: tuple[int, int, int, int] = WHITE) -> "RenderTarget":
        size = (int(width), int(height))
        if size[0] < 1 or size[1] < 1:
            raise RenderSurfaceUnavailable(f"Cannot allocate a {size[0]}x{size[1]} surface")
        try:
            image = Image.new("RGBA", size, background)
        except (ValueError, MemoryError, Image.DecompressionBombError) as exc:
            raise RenderSurfaceUnavailable(f"Cannot allocate a {size[0]}x{size[1]} surface: {exc}") from exc
        return cls(image)

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def draw_region(self, source: RasterSource, src: Tile, dest: Tile) -> bool:
        """Scale the ``src`` window of ``source`` into ``dest``; False if nothing was drawn."""

        width, height = int(round(dest.w)), int(round(dest.h))
        box = _clamp_box(src.box, source.width, source.height)
        if width < 1 or height < 1 or box[2] <= box[0] or box[3] <= box[1]:
            logger.debug("Skipping degenerate region %s -> %s", src, dest)
            return False
        region = source.image.resize((width, height), Image.Resampling.LANCZOS, box=box)
        self.image.paste(region, (int(round(dest.x)), int(round(dest.y))), region)
        return True


@dataclass(frozen=True)
class SheetRender:
    image: Image.Image
    layout: ContactSheetLayout

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


def _clamp_box(box: tuple[float, float, float, float], width: int, height: int) -> tuple[float, float, float, float]:
    left, top, right, bottom = box
    return (max(0.0, left), max(0.0, top), min(float(width), right), min(float(height), bottom))


def render_grid_tiles(source: RasterSource, partition: GridPartition) -> list[Image.Image]:
    """Cut ``source`` into one image per tile, sampling at fractional boundaries.

    Tiles too small to hold a pixel have no surface and are left out.
    """

    tiles: list[Image.Image] = []
    for tile in partition.tiles:
        try:
            target = RenderTarget.acquire(tile.w, tile.h, TRANSPARENT)
        except RenderSurfaceUnavailable as exc:
            logger.debug("Tile %s skipped: %s", tile, exc)
            continue
        width, height = target.size
        target.draw_region(source, tile, Tile(0, 0, width, height))
        tiles.append(target.image)
    return tiles


def compose_contact_sheet(target: RenderTarget, sources: Sequence[RasterSource], layout: ContactSheetLayout) -> None:
    """Crop-to-fill every source into its cell on ``target``."""

    for source, cell in zip(sources, layout.placements):
        if cell.w <= 0 or cell.h <= 0:
            continue
        window = crop_to_fill(source.width, source.height, cell.w, cell.h)
        target.draw_region(source, window, cell)


def render_contact_sheet(sources: Sequence[RasterSource], spec: ContactSheetSpec) -> Optional[SheetRender]:
    """Render a storyboard sheet on a fresh white target; ``None`` for no sources."""

    if not sources:
        return None
    layout = compute_contact_sheet_layout(len(sources), sources[0].size, spec)
    if layout is None:
        return None
    target = RenderTarget.acquire(layout.width, layout.height, WHITE)
    compose_contact_sheet(target, sources, layout)
    logger.info("Rendered contact sheet %sx%s from %s images", *target.size, len(sources))
    return SheetRender(image=target.image, layout=layout)


@lru_cache(maxsize=32)
def load_font(size: float, bold: bool) -> tuple[Font, bool]:
    """Return a font at ``size`` and whether it carries a real weight for ``bold``."""

    for name in FONT_CANDIDATES[bold]:
        try:
            return ImageFont.truetype(name, size), True
        except OSError:
            continue
    logger.debug("No TrueType face found for bold=%s, using the bundled default", bold)
    return ImageFont.load_default(size=size), not bold


def compose_card(target: RenderTarget, card: CompositionCard, style: CardStyle) -> None:
    """Draw a logo card: white background, fitted image, centred text block."""

    canvas_w, canvas_h = target.size
    draw = ImageDraw.Draw(target.image)
    draw.rectangle((0, 0, canvas_w, canvas_h), fill=WHITE)

    source = card.source
    placement = card_image_placement(canvas_w, canvas_h, source.width, source.height, card.image_offset_percent)
    target.draw_region(source, Tile(0, 0, source.width, source.height), placement)

    lines = card.lines
    if not lines:
        return
    font_size = card.font_size_override if card.font_size_override is not None else style.font_size
    font, has_weight = load_font(font_size, style.bold)
    stroke = 1 if style.bold and not has_weight else 0
    for line, y in zip(lines, text_baselines(canvas_h, card.text_anchor_percent, font_size, len(lines))):
        if not line:
            continue
        draw.text(
            (canvas_w / 2, y),
            line,
            fill=style.color,
            font=font,
            anchor="mm",
            stroke_width=stroke,
            stroke_fill=style.color,
        )


def render_card(card: CompositionCard, style: CardStyle) -> Image.Image:
    """Render ``card`` from scratch; no state survives between calls."""

    target = RenderTarget.acquire(style.canvas_width, style.canvas_height, WHITE)
    compose_card(target, card, style)
    return target.image
