import pytest
from pydantic import ValidationError as SettingsError

from mediatools.core import Casing, SplitMode, StoryboardProject
from mediatools.core.errors import ValidationError
from mediatools.settings import (
    AdLinkRequest,
    CardComposerRequest,
    CardOverrideRequest,
    RenameRequest,
    SplitRequest,
    StoryboardRequest,
    ToolkitConfig,
)


def test_split_request_builds_grid():
    spec = SplitRequest.model_validate({"mode": "horz", "rows": 4, "cols": 9}).to_spec()
    assert spec.mode is SplitMode.ROWS_ONLY
    assert (spec.effective_rows, spec.effective_cols) == (4, 1)


def test_split_request_rejects_zero_columns():
    with pytest.raises(SettingsError):
        SplitRequest(cols=0)


def test_storyboard_request_applies_to_project():
    project = StoryboardRequest(gap=4, width=1000, auto_width=False).apply(StoryboardProject(name="Board_1"))
    assert project.sheet_spec.gap == 4
    assert project.sheet_spec.target_width == 1000


def test_storyboard_request_keeps_last_render():
    project = StoryboardProject(name="Board_2", last_rendered=b"jpeg")
    updated = StoryboardRequest(gap=2).apply(project)
    assert (updated.name, updated.last_rendered, updated.gap) == ("Board_2", b"jpeg", 2)
    assert updated.sheet_spec.target_width is None


def test_storyboard_width_upper_bound():
    with pytest.raises(SettingsError):
        StoryboardRequest(width=9000)


def test_card_composer_parses_color_strings():
    assert CardComposerRequest(color="#0f0").to_style().color == (0, 255, 0)
    assert CardComposerRequest(color="10, 20, 30").color == (10, 20, 30)


def test_card_composer_bad_color():
    with pytest.raises((SettingsError, ValidationError)):
        CardComposerRequest(color="#12")


def test_card_override_blank_font_size_is_unset():
    assert CardOverrideRequest(font_size_override="").font_size_override is None


def test_rename_request_to_rules():
    rules = RenameRequest.model_validate(
        {"casing": "kebab", "clean_name": True, "numbering": {"start": 5, "pad": 2}, "extension_override": ""}
    ).to_rules()
    assert rules.casing is Casing.KEBAB
    assert (rules.numbering.start, rules.numbering.pad) == (5, 2)
    assert rules.extension_override is None


def test_adlink_request_splits_pasted_text():
    request = AdLinkRequest(server="s3", filenames="a.jpg\n\nb.mp3\n")
    assert request.filenames == ["a.jpg", "b.mp3"]


def test_adlink_request_unknown_server():
    with pytest.raises(SettingsError):
        AdLinkRequest(server="ftp")


def test_toolkit_config_from_env():
    config = ToolkitConfig.from_env(
        {"MEDIATOOLS_OP_TIMEOUT": "2.5", "MEDIATOOLS_MAX_UPLOAD_MB": "3", "MEDIATOOLS_LOG_LEVEL": "debug"}
    )
    assert config.op_timeout_seconds == 2.5
    assert config.max_upload_bytes == 3 * 1024 * 1024
    assert config.log_level == "DEBUG"


def test_toolkit_config_defaults():
    config = ToolkitConfig.from_env({})
    assert config.op_timeout_seconds is None
    assert config.log_level == "INFO"


def test_toolkit_config_rejects_bad_values():
    with pytest.raises(ValidationError):
        ToolkitConfig.from_env({"MEDIATOOLS_OP_TIMEOUT": "soon"})
    with pytest.raises(SettingsError):
        ToolkitConfig.from_env({"MEDIATOOLS_LOG_LEVEL": "chatty"})
