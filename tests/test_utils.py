from io import BytesIO

import pytest
from PIL import Image

from mediatools.core import DownloadArtifact, MediaAsset
from mediatools.core.errors import DecodeFailure, ValidationError
from mediatools.utils import file_tools, image_tools, validators


def test_sanitize_filename():
    assert file_tools.sanitize_filename('Big  Sale: "50%"?') == "Big_Sale_50%"


def test_split_filename_keeps_dot():
    assert file_tools.split_filename("photo.final.JPG") == ("photo.final", ".JPG")
    assert file_tools.split_filename("README") == ("README", "")


def test_asset_from_path_guesses_mime(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00" * 10)
    asset = file_tools.asset_from_path(path)
    assert asset.mime == "video/mp4"
    assert asset.category == "video"


def test_asset_from_path_enforces_size_limit(tmp_path):
    path = tmp_path / "big.png"
    path.write_bytes(b"\x00" * 20)
    with pytest.raises(ValidationError):
        file_tools.asset_from_path(path, max_bytes=10)


def test_filter_assets_by_category():
    assets = [
        MediaAsset("a.png", b"", "image/png"),
        MediaAsset("b.mp4", b"", "video/mp4"),
        MediaAsset("c.pdf", b"", "application/pdf"),
    ]
    assert [a.name for a in file_tools.filter_assets(assets, "image")] == ["a.png"]
    assert [a.name for a in file_tools.filter_assets(assets, "pdf")] == ["c.pdf"]


def test_unknown_category_is_rejected():
    with pytest.raises(ValidationError):
        validators.matches_category("image/png", "audio")


def test_write_artifact_creates_directory(tmp_path):
    target = file_tools.write_artifact(DownloadArtifact("out.zip", b"zip"), tmp_path / "exports")
    assert target.read_bytes() == b"zip"


@pytest.mark.parametrize("value, expected", [("#ff8000", (255, 128, 0)), ("#fff", (255, 255, 255)), ("1,2,3", (1, 2, 3))])
def test_parse_color(value, expected):
    assert validators.parse_color(value) == expected


def test_parse_color_out_of_range():
    with pytest.raises(ValidationError):
        validators.parse_color("0,0,300")


def test_decode_image_failure_names_asset():
    with pytest.raises(DecodeFailure, match="broken.png"):
        image_tools.decode_image(MediaAsset("broken.png", b"not an image", "image/png"))


def test_encode_jpeg_flattens_transparency():
    image = Image.new("RGBA", (4, 4), (0, 0, 0, 0))
    data = image_tools.encode_image(image, "JPEG", quality=90)
    with Image.open(BytesIO(data)) as decoded:
        assert decoded.mode == "RGB"
        assert min(decoded.getpixel((1, 1))) > 240


def test_format_for_extension():
    assert image_tools.format_for_extension(".jpg") == "JPEG"
    assert image_tools.format_for_extension("png") == "PNG"
    assert image_tools.format_for_extension(".unknown") == "PNG"


def test_make_preview_is_bounded():
    data = image_tools.make_preview(Image.new("RGB", (1000, 500)))
    with Image.open(BytesIO(data)) as preview:
        assert preview.size == (256, 128)
