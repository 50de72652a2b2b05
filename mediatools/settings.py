"""Validated option models for each tool plus process-wide configuration."""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .core import CardStyle, Casing, GridSpec, Numbering, RenameRuleSet, SplitMode, StoryboardProject
from .core.adlinks import parse_filenames
from .core.layout import MAX_SHEET_WIDTH
from .utils import validators

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50MB guardrail
ENV_PREFIX = "MEDIATOOLS_"


def _blank_to_none(value):
    if value in (None, "", "null"):
        return None
    return value


class SplitRequest(BaseModel):
    """Grid split options."""

    mode: SplitMode = SplitMode.GRID
    rows: int = Field(2, ge=1)
    cols: int = Field(2, ge=1)

    def to_spec(self) -> GridSpec:
        return GridSpec(mode=self.mode, rows=self.rows, cols=self.cols)


class StoryboardRequest(BaseModel):
    """Storyboard sheet options."""

    gap: int = Field(0, ge=0)
    width: int = Field(1920, ge=1, le=MAX_SHEET_WIDTH)
    auto_width: bool = True

    def apply(self, project: StoryboardProject) -> StoryboardProject:
        return dataclasses.replace(project, gap=self.gap, width=self.width, auto_width=self.auto_width)


class CardComposerRequest(BaseModel):
    """Settings shared by all logo cards."""

    global_font_size: float = Field(28, gt=0)
    bold: bool = False
    color: tuple[int, int, int] = (0, 0, 0)
    global_image_offset_percent: float = Field(0, ge=-50, le=50)
    canvas_width: int = Field(300, ge=1)
    canvas_height: int = Field(400, ge=1)

    @field_validator("color", mode="before")
    @classmethod
    def _parse_color(cls, value):
        if isinstance(value, str):
            return validators.parse_color(value)
        return value

    def to_style(self) -> CardStyle:
        return CardStyle(
            font_size=self.global_font_size,
            bold=self.bold,
            color=self.color,
            image_offset_percent=self.global_image_offset_percent,
            canvas_width=self.canvas_width,
            canvas_height=self.canvas_height,
        )


class CardOverrideRequest(BaseModel):
    """Per-card edits; unset fields leave the card unchanged."""

    text: Optional[str] = None
    font_size_override: Optional[float] = Field(None, gt=0)
    clear_font_size: bool = False
    text_y_percent: Optional[float] = Field(None, ge=0, le=100)
    img_y_percent: Optional[float] = Field(None, ge=-50, le=50)
    filename: Optional[str] = None

    @field_validator("font_size_override", mode="before")
    @classmethod
    def _empty_font_size(cls, value):
        return _blank_to_none(value)


class NumberingRequest(BaseModel):
    start: int = 1
    pad: int = Field(3, ge=0, le=32)


class RenameRequest(BaseModel):
    """Batch rename rules."""

    prefix: str = ""
    suffix: str = ""
    find: str = ""
    replace: str = ""
    casing: Casing = Casing.NONE
    clean_name: bool = False
    numbering: Optional[NumberingRequest] = None
    extension_override: Optional[str] = None

    @field_validator("extension_override", mode="before")
    @classmethod
    def _empty_extension(cls, value):
        return _blank_to_none(value)

    def to_rules(self) -> RenameRuleSet:
        numbering = None
        if self.numbering is not None:
            numbering = Numbering(start=self.numbering.start, pad=self.numbering.pad)
        return RenameRuleSet(
            prefix=self.prefix,
            suffix=self.suffix,
            find=self.find,
            replace=self.replace,
            casing=self.casing,
            clean_name=self.clean_name,
            numbering=numbering,
            extension_override=self.extension_override,
        )


class AdLinkRequest(BaseModel):
    """Ad-link generation input; ``filenames`` may be pasted text."""

    server: Literal["aldi", "s3"] = "aldi"
    folder_path: str = ""
    filenames: list[str] = Field(default_factory=list)

    @field_validator("filenames", mode="before")
    @classmethod
    def _split_text(cls, value):
        if isinstance(value, str):
            return parse_filenames(value)
        return value


class ToolkitConfig(BaseModel):
    """Process-wide knobs, read from ``MEDIATOOLS_*`` environment variables."""

    op_timeout_seconds: Optional[float] = Field(None, gt=0)
    max_upload_bytes: int = Field(DEFAULT_MAX_UPLOAD_BYTES, ge=1)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ToolkitConfig":
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        timeout = validators.parse_optional_float(env.get(f"{ENV_PREFIX}OP_TIMEOUT"), "MEDIATOOLS_OP_TIMEOUT")
        if timeout is not None:
            values["op_timeout_seconds"] = timeout
        max_mb = validators.parse_optional_int(env.get(f"{ENV_PREFIX}MAX_UPLOAD_MB"), "MEDIATOOLS_MAX_UPLOAD_MB")
        if max_mb is not None:
            values["max_upload_bytes"] = max_mb * 1024 * 1024
        if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
            values["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"]
        return cls.model_validate(values)
