"""Validation helpers for user inputs."""

from __future__ import annotations

from typing import Optional

from ..core import MediaAsset
from ..core.errors import ValidationError

MIME_CATEGORIES = {
    "image": "image/",
    "video": "video/",
    "pdf": "application/pdf",
}


def matches_category(mime: str, category: str) -> bool:
    """Whether a declared MIME type belongs to a tool's input category."""

    try:
        prefix = MIME_CATEGORIES[category]
    except KeyError as exc:
        raise ValidationError(f"Unknown media category: {category}") from exc
    if category == "pdf":
        return mime == prefix
    return mime.startswith(prefix)


def validate_asset_size(asset: MediaAsset, max_bytes: Optional[int]) -> MediaAsset:
    """Reject assets above the intake guardrail."""

    if max_bytes is not None and len(asset.data) > max_bytes:
        raise ValidationError(f"{asset.name} exceeds the {max_bytes // (1024 * 1024)}MB upload limit")
    return asset


def parse_optional_float(value: str | None, field: str) -> Optional[float]:
    """Parse a positive float from a string value, if provided."""

    if value is None or value == "":
        return None
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be a number") from exc
    if parsed <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return parsed


def parse_optional_int(value: str | None, field: str) -> Optional[int]:
    """Parse a positive integer from a string value, if provided."""

    if value is None or value == "":
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be an integer") from exc
    if parsed <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return parsed


def parse_color(value: str) -> tuple[int, int, int]:
    """Parse ``#RRGGBB``, ``#RGB`` or ``R,G,B`` into an RGB triple."""

    text = value.strip()
    if text.startswith("#"):
        digits = text[1:]
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) != 6:
            raise ValidationError("Color must be #RRGGBB or #RGB")
        try:
            return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]
        except ValueError as exc:
            raise ValidationError("Color must be hexadecimal") from exc

    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 3:
        raise ValidationError("Color must be #RRGGBB or R,G,B")
    try:
        numbers = [int(p) for p in parts]
    except ValueError as exc:
        raise ValidationError("Color must be numeric R,G,B") from exc
    if any(n < 0 or n > 255 for n in numbers):
        raise ValidationError("Color values must be between 0 and 255")
    return tuple(numbers)  # type: ignore[return-value]
