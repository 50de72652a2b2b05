"""Core data model shared by the layout, composition and export stages."""

__all__ = [
    "AssetReport",
    "AssetStatus",
    "Casing",
    "CardStyle",
    "CompositionCard",
    "ContactSheetLayout",
    "ContactSheetSpec",
    "DownloadArtifact",
    "ExportEntry",
    "FrameInfo",
    "GridPartition",
    "GridSpec",
    "MediaAsset",
    "Numbering",
    "RasterSource",
    "RenameRuleSet",
    "SplitMode",
    "StoryboardProject",
    "Tile",
    "VideoMetadata",
]

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from PIL import Image

from .errors import ValidationError


class SplitMode(str, Enum):
    """How a source image is partitioned by the splitter."""

    GRID = "grid"
    ROWS_ONLY = "horz"
    COLS_ONLY = "vert"


class Casing(str, Enum):
    NONE = "none"
    UPPER = "upper"
    LOWER = "lower"
    CAMEL = "camel"
    KEBAB = "kebab"


class AssetStatus(str, Enum):
    """Per-asset outcome of a batch step."""

    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class AssetReport:
    """Outcome of one asset within a batch."""

    name: str
    status: AssetStatus
    error: Optional[str] = None


@dataclass(frozen=True)
class MediaAsset:
    """Raw bytes supplied by the user, tagged with a declared MIME type."""

    name: str
    data: bytes = field(repr=False)
    mime: str = "application/octet-stream"

    @property
    def category(self) -> str:
        if self.mime == "application/pdf":
            return "pdf"
        return self.mime.split("/", 1)[0]


@dataclass(frozen=True)
class RasterSource:
    """An immutable decoded RGBA frame with its natural size."""

    image: Image.Image = field(repr=False)
    format: Optional[str] = None

    @classmethod
    def from_image(cls, image: Image.Image, format: Optional[str] = None) -> "RasterSource":
        # convert() always hands back a fresh buffer, so callers cannot mutate ours
        return cls(image=image.convert("RGBA"), format=format or image.format)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


@dataclass(frozen=True)
class Tile:
    """Axis-aligned rectangle in source or target space."""

    x: float
    y: float
    w: float
    h: float

    @property
    def box(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.x + self.w, self.y + self.h)


@dataclass(frozen=True)
class GridSpec:
    """Splitter layout: rows and columns after the mode is applied."""

    mode: SplitMode = SplitMode.GRID
    rows: int = 2
    cols: int = 2

    def __post_init__(self) -> None:
        if self.rows < 1 or self.cols < 1:
            raise ValidationError("Rows and columns must be at least 1")

    @property
    def effective_rows(self) -> int:
        return 1 if self.mode is SplitMode.COLS_ONLY else self.rows

    @property
    def effective_cols(self) -> int:
        return 1 if self.mode is SplitMode.ROWS_ONLY else self.cols


@dataclass(frozen=True)
class GridPartition:
    rows: int
    cols: int
    tile_width: float
    tile_height: float
    tiles: tuple[Tile, ...]


@dataclass(frozen=True)
class ContactSheetSpec:
    """Storyboard layout options; ``target_width=None`` means auto width."""

    gap: int = 0
    target_width: Optional[int] = None


@dataclass(frozen=True)
class ContactSheetLayout:
    cols: int
    rows: int
    width: float
    height: float
    cell_width: float
    cell_height: float
    placements: tuple[Tile, ...]


@dataclass(frozen=True)
class CardStyle:
    """Settings shared by every card of the logo composer."""

    font_size: float = 28
    bold: bool = False
    color: tuple[int, int, int] = (0, 0, 0)
    image_offset_percent: float = 0.0
    canvas_width: int = 300
    canvas_height: int = 400


@dataclass(frozen=True)
class CompositionCard:
    """One logo card; edits produce a new card via ``dataclasses.replace``."""

    source: RasterSource
    text: str = ""
    filename: str = ""
    font_size_override: Optional[float] = None
    text_anchor_percent: float = 90.0
    image_offset_percent: float = 0.0

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n") if self.text else []


@dataclass(frozen=True)
class StoryboardProject:
    name: str
    images: tuple[RasterSource, ...] = ()
    gap: int = 0
    width: int = 1920
    auto_width: bool = True
    last_rendered: Optional[bytes] = field(default=None, repr=False)

    @property
    def sheet_spec(self) -> ContactSheetSpec:
        return ContactSheetSpec(gap=self.gap, target_width=None if self.auto_width else self.width)


@dataclass(frozen=True)
class Numbering:
    start: int = 1
    pad: int = 3


@dataclass(frozen=True)
class RenameRuleSet:
    """Stateless rename configuration, applied fresh to every item."""

    prefix: str = ""
    suffix: str = ""
    find: str = ""
    replace: str = ""
    casing: Casing = Casing.NONE
    clean_name: bool = False
    numbering: Optional[Numbering] = None
    extension_override: Optional[str] = None


@dataclass(frozen=True)
class ExportEntry:
    """A named payload; ``/`` in the name becomes a directory in archives."""

    name: str
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class DownloadArtifact:
    """A single file ready to hand to the user."""

    filename: str
    data: bytes = field(repr=False)
    entries: tuple[str, ...] = ()

    @property
    def is_archive(self) -> bool:
        return bool(self.entries)


@dataclass
class VideoMetadata:
    """Basic metadata for a source video."""

    width: int
    height: int
    fps: float
    duration_seconds: float


@dataclass(frozen=True)
class FrameInfo:
    """Metadata for a sampled frame."""

    index: int
    timestamp: float
    width: int
    height: int
