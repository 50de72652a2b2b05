"""Ordered, side-effect-free filename transformation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from . import Casing, RenameRuleSet

_WHITESPACE = re.compile(r"\s+")
_NOT_CLEAN = re.compile(r"[^a-zA-Z0-9\-_]")
_CAMEL_BREAK = re.compile(r"[^a-zA-Z0-9]+(.)")
_LOWER_UPPER = re.compile(r"([a-z])([A-Z])")
_KEBAB_RUN = re.compile(r"[\s_]+")


@dataclass(frozen=True)
class RenameSubject:
    """What the pipeline needs from an item: its untouched name parts and position."""

    original_base: str
    extension: str
    index: int


def clean(name: str) -> str:
    return _NOT_CLEAN.sub("", _WHITESPACE.sub("_", name))


def find_replace(name: str, find: str, replace: str) -> str:
    if not find:
        return name
    return name.replace(find, replace)


def apply_casing(name: str, casing: Casing) -> str:
    if casing is Casing.UPPER:
        return name.upper()
    if casing is Casing.LOWER:
        return name.lower()
    if casing is Casing.CAMEL:
        return _CAMEL_BREAK.sub(lambda m: m.group(1).upper(), name.lower())
    if casing is Casing.KEBAB:
        return _KEBAB_RUN.sub("-", _LOWER_UPPER.sub(r"\1-\2", name)).lower()
    return name


def number_suffix(start: int, index: int, pad: int) -> str:
    return "_" + str(start + index).rjust(pad, "0")


def normalize_extension(extension: str) -> str:
    return extension if extension.startswith(".") else f".{extension}"


def transform(original_base: str, extension: str, rules: RenameRuleSet, index: int) -> str:
    """Derive a new filename; steps run in a fixed order.

    clean -> find/replace -> casing -> numbering -> prefix/suffix -> extension.
    The original extension is kept unless ``rules.extension_override`` is set.
    """

    name = original_base
    if rules.clean_name:
        name = clean(name)
    name = find_replace(name, rules.find, rules.replace)
    name = apply_casing(name, rules.casing)
    if rules.numbering is not None:
        name += number_suffix(rules.numbering.start, index, rules.numbering.pad)
    name = f"{rules.prefix}{name}{rules.suffix}"
    ext = normalize_extension(rules.extension_override) if rules.extension_override else extension
    return name + ext


def derive_all(items: Iterable[RenameSubject], rules: RenameRuleSet) -> list[str]:
    """Recompute every name from its original base name, preserving order."""

    return [transform(item.original_base, item.extension, rules, item.index) for item in items]
