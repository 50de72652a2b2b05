import zipfile
from io import BytesIO

import pytest

from mediatools.core import ExportEntry
from mediatools.core.errors import NameCollisionExhausted
from mediatools.core.packager import NameRegistry, build_archive, package_single, resolve_names, split_entry_name


def _read(artifact):
    with zipfile.ZipFile(BytesIO(artifact.data)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


def test_duplicate_names_get_counters():
    entries = [ExportEntry("logo.png", bytes([i])) for i in range(3)]
    assert [entry.name for entry in resolve_names(entries)] == ["logo.png", "logo_1.png", "logo_2.png"]


def test_counter_skips_names_already_taken():
    entries = [ExportEntry("a.png", b"1"), ExportEntry("a_1.png", b"2"), ExportEntry("a.png", b"3")]
    assert [entry.name for entry in resolve_names(entries)] == ["a.png", "a_1.png", "a_2.png"]


@pytest.mark.parametrize(
    "name, expected",
    [
        ("clip/03.jpg", ("clip/03", ".jpg")),
        ("archive.tar.gz", ("archive.tar", ".gz")),
        ("v1.2/frame", ("v1.2/frame", "")),
        (".hidden", (".hidden", "")),
    ],
)
def test_split_entry_name(name, expected):
    assert split_entry_name(name) == expected


def test_registry_gives_up_after_attempt_limit():
    registry = NameRegistry(max_attempts=2)
    for name in ("x.png", "x_1.png", "x_2.png"):
        registry.claim(name)
    with pytest.raises(NameCollisionExhausted):
        registry.claim("x.png")


def test_archive_keeps_payloads_and_directories():
    entries = [ExportEntry("clip/1.jpg", b"one"), ExportEntry("clip/1.jpg", b"two"), ExportEntry("top.png", b"3")]
    artifact = build_archive(entries, "out.zip")
    assert artifact.filename == "out.zip"
    assert artifact.is_archive
    assert _read(artifact) == {"clip/1.jpg": b"one", "clip/1_1.jpg": b"two", "top.png": b"3"}


def test_archive_bytes_are_reproducible():
    entries = [ExportEntry("a.txt", b"hello")]
    assert build_archive(entries, "a.zip").data == build_archive(entries, "a.zip").data


def test_empty_archive_is_none():
    assert build_archive([], "empty.zip") is None


def test_single_download_bypasses_archive():
    artifact = package_single(ExportEntry("card.png", b"png"))
    assert (artifact.filename, artifact.data, artifact.is_archive) == ("card.png", b"png", False)
