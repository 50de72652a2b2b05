"""Pure layout geometry for grid splits, contact sheets and logo cards."""

from __future__ import annotations

import logging
import math
from typing import Optional

from . import ContactSheetLayout, ContactSheetSpec, GridPartition, GridSpec, Tile
from .errors import ValidationError

logger = logging.getLogger(__name__)

MAX_SHEET_WIDTH = 8192
CARD_PADDING = 20
LINE_HEIGHT_FACTOR = 1.25


def compute_grid_partition(width: float, height: float, spec: GridSpec) -> GridPartition:
    """Partition a ``width`` x ``height`` source into ``rows * cols`` equal tiles.

    Tile sizes stay real-valued; the renderer samples at the fractional
    boundaries instead of redistributing a remainder. Tiles are returned in
    row-major order.
    """

    rows = spec.effective_rows
    cols = spec.effective_cols
    tile_w = width / cols
    tile_h = height / rows
    tiles = tuple(
        Tile(x=col * tile_w, y=row * tile_h, w=tile_w, h=tile_h)
        for row in range(rows)
        for col in range(cols)
    )
    return GridPartition(rows=rows, cols=cols, tile_width=tile_w, tile_height=tile_h, tiles=tiles)


def resolve_sheet_grid(item_count: int) -> tuple[int, int]:
    """Square-ish grid: ``cols = ceil(sqrt(n))``, ``rows = ceil(n / cols)``."""

    columns = math.ceil(math.sqrt(item_count))
    rows = math.ceil(item_count / columns)
    return columns, rows


def compute_contact_sheet_layout(
    item_count: int,
    first_size: tuple[int, int],
    spec: ContactSheetSpec,
) -> Optional[ContactSheetLayout]:
    """Lay out ``item_count`` cells on a sheet sized from the first image.

    The first image's aspect ratio is the reference cell aspect. An incomplete
    last row is centred horizontally. Returns ``None`` for an empty sheet.
    """

    if item_count <= 0:
        return None
    first_w, first_h = first_size
    if first_w <= 0 or first_h <= 0:
        raise ValidationError("First image must have a positive size")

    cols, rows = resolve_sheet_grid(item_count)
    width = float(first_w * cols if spec.target_width is None else spec.target_width)
    width = min(width, MAX_SHEET_WIDTH)
    height = (width * (rows / cols)) / (first_w / first_h)

    gap = spec.gap
    cell_w = (width - gap * (cols + 1)) / cols
    cell_h = (height - gap * (rows + 1)) / rows

    placements: list[Tile] = []
    placed = 0
    for row in range(rows):
        col_count = min(cols, item_count - placed)
        if col_count <= 0:
            break
        shift_x = ((cols - col_count) * (cell_w + gap)) / 2
        y = gap + row * (cell_h + gap)
        for col in range(col_count):
            x = gap + col * (cell_w + gap) + shift_x
            placements.append(Tile(x=x, y=y, w=cell_w, h=cell_h))
        placed += col_count

    logger.debug("Contact sheet for %s items: %sx%s grid, %.1fx%.1f canvas", item_count, cols, rows, width, height)
    return ContactSheetLayout(
        cols=cols,
        rows=rows,
        width=width,
        height=height,
        cell_width=cell_w,
        cell_height=cell_h,
        placements=tuple(placements),
    )


def crop_to_fill(src_w: float, src_h: float, cell_w: float, cell_h: float) -> Tile:
    """Centred source window whose aspect matches the cell."""

    cell_ratio = cell_w / cell_h
    if src_w / src_h > cell_ratio:
        crop_h = src_h
        crop_w = crop_h * cell_ratio
        return Tile(x=(src_w - crop_w) / 2, y=0.0, w=crop_w, h=crop_h)
    crop_w = src_w
    crop_h = crop_w / cell_ratio
    return Tile(x=0.0, y=(src_h - crop_h) / 2, w=crop_w, h=crop_h)


def scale_to_fit(src_w: float, src_h: float, avail_w: float, avail_h: float) -> tuple[float, float]:
    """Largest size with the source aspect that fits the available area."""

    scale = max(0.0, min(avail_w / src_w, avail_h / src_h))
    return src_w * scale, src_h * scale


def card_image_placement(
    canvas_w: float,
    canvas_h: float,
    src_w: float,
    src_h: float,
    offset_percent: float,
    pad: float = CARD_PADDING,
) -> Tile:
    """Scale-to-fit the image inside the padded card, centred, then shifted vertically."""

    w, h = scale_to_fit(src_w, src_h, canvas_w - pad * 2, canvas_h - pad * 2)
    x = (canvas_w - w) / 2
    y = (canvas_h - h) / 2 + (offset_percent / 100) * canvas_h
    return Tile(x=x, y=y, w=w, h=h)


def text_baselines(canvas_h: float, anchor_percent: float, font_size: float, line_count: int) -> list[float]:
    """Middle-line y positions of a text block centred on the anchor."""

    line_height = font_size * LINE_HEIGHT_FACTOR
    start = canvas_h * (anchor_percent / 100) - (line_height * line_count) / 2 + line_height / 2
    return [start + i * line_height for i in range(line_count)]
