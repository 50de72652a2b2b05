import zipfile

from PIL import Image

from mtools import cli


def _png(path, size=(40, 30)):
    Image.new("RGB", size, (10, 200, 30)).save(path)
    return path


def test_build_parser_creates_arguments():
    parser = cli.build_parser()
    args = parser.parse_args(["--dry-run", "split", "input.png", "--mode", "vert", "--cols", "3", "-o", "out"])
    assert args.command == "split"
    assert args.inputs[0].name == "input.png"
    assert args.mode == "vert"
    assert args.cols == 3
    assert args.output_dir.name == "out"
    assert args.dry_run is True


def test_main_dry_run_returns_zero(tmp_path):
    assert cli.main(["--dry-run", "stills", "missing.mp4", "-o", str(tmp_path)]) == 0
    assert list(tmp_path.iterdir()) == []


def test_split_writes_archive(tmp_path):
    source = _png(tmp_path / "a.png")
    out = tmp_path / "out"
    assert cli.main(["split", str(source), "--rows", "1", "--cols", "2", "-o", str(out)]) == 0
    with zipfile.ZipFile(out / "split_images.zip") as zf:
        assert zf.namelist() == ["1.png", "2.png"]


def test_storyboard_writes_single_sheet(tmp_path):
    images = [str(_png(tmp_path / f"{n}.png")) for n in range(3)]
    assert cli.main(["storyboard", *images, "--name", "Launch Board", "-o", str(tmp_path)]) == 0
    with Image.open(tmp_path / "Launch_Board.jpg") as sheet:
        assert sheet.size == (80, 60)


def test_cards_with_captions(tmp_path):
    images = [str(_png(tmp_path / "logo.png")), str(_png(tmp_path / "other.png"))]
    out = tmp_path / "cards"
    assert cli.main(["cards", *images, "--text", "Big\\nSale", "--bold", "-o", str(out)]) == 0
    with zipfile.ZipFile(out / "logos.zip") as zf:
        assert sorted(zf.namelist()) == ["Big_Sale.png", "other.png"]


def test_rename_dry_run_prints_mapping(capsys):
    assert cli.main(["--dry-run", "rename", "My File.JPG", "--clean", "--casing", "kebab"]) == 0
    assert "My File.JPG -> my-file.JPG" in capsys.readouterr().out


def test_rename_writes_archive(tmp_path):
    source = tmp_path / "notes.txt"
    source.write_text("hi")
    assert cli.main(["rename", str(source), "--numbering", "--pad", "2", "-o", str(tmp_path)]) == 0
    with zipfile.ZipFile(tmp_path / "renamed_files.zip") as zf:
        assert zf.read("notes_01.txt") == b"hi"


def test_adlinks_prints_both_blocks(capsys):
    assert cli.main(["adlinks", "a.jpg", "b.mp4", "--folder", "promo"]) == 0
    out = capsys.readouterr().out
    assert "# Ad exposure code" in out
    assert "promo/b.mp4" in out
    assert "promo/b.jpg" in out


def test_missing_input_is_an_error(tmp_path, capsys):
    assert cli.main(["split", str(tmp_path / "nope.png")]) == 1
    assert "File not found" in capsys.readouterr().err


def test_invalid_settings_are_an_error(tmp_path):
    source = _png(tmp_path / "a.png")
    assert cli.main(["split", str(source), "--rows", "0", "-o", str(tmp_path)]) == 1


def test_bad_environment_config_is_an_error(monkeypatch, capsys):
    monkeypatch.setenv("MEDIATOOLS_LOG_LEVEL", "chatty")
    assert cli.main(["adlinks", "a.jpg"]) == 1
    assert "Unknown log level" in capsys.readouterr().err


def test_upload_limit_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("MEDIATOOLS_MAX_UPLOAD_MB", "1")
    big = tmp_path / "big.txt"
    big.write_bytes(b"\x00" * (1024 * 1024 + 1))
    assert cli.main(["rename", str(big), "-o", str(tmp_path / "out")]) == 1
