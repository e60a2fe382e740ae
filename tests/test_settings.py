"""settings.json loading."""

import json

from mathvisual.settings import DEFAULT_SETTINGS, load_settings


def test_packaged_settings_match_defaults():
    assert load_settings() == DEFAULT_SETTINGS


def test_missing_file_falls_back(tmp_path, caplog):
    settings = load_settings(str(tmp_path / "nope.json"))
    assert settings == DEFAULT_SETTINGS
    assert "Could not load" in caplog.text


def test_malformed_file_falls_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_settings(str(path)) == DEFAULT_SETTINGS


def test_values_merge_over_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"render_delay_ms": 500, "start_index": 7}))
    settings = load_settings(str(path))
    assert settings["render_delay_ms"] == 500
    assert settings["start_index"] == 7
    assert settings["visibility_threshold"] == DEFAULT_SETTINGS["visibility_threshold"]


def test_defaults_not_mutated(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"window_width": 10}))
    load_settings(str(path))
    assert DEFAULT_SETTINGS["window_width"] == 640
