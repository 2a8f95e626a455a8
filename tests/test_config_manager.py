"""Tests for ConfigManager."""
import json

import pytest

from memtrack.config import ConfigManager, DEFAULT_CONFIG


def _write_config(tmp_path, data):
    path = tmp_path / "memtrack_config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_defaults_without_file():
    config = ConfigManager()

    assert config.get('server.port') == 8080
    assert config.get('server.push_interval_sec') == 1.0
    assert config.get('sampler.max_processes') == 1024
    assert config.get('sampler.min_working_set_bytes') is None
    assert config.all_config == DEFAULT_CONFIG


def test_file_values_merge_over_defaults(tmp_path):
    path = _write_config(tmp_path, {"server": {"port": 9090}, "static": {"root": "/srv/www"}})

    config = ConfigManager(path)

    assert config.get('server.port') == 9090
    assert config.get('server.host') == "0.0.0.0"
    assert config.get('static.root') == "/srv/www"
    assert config.get('static.index_file') == "index.html"


def test_missing_key_returns_default():
    config = ConfigManager()

    assert config.get('server.nonexistent', 'fallback') == 'fallback'
    assert config.get('server.port.deeper') is None


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigManager(str(tmp_path / "absent.json"))


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError):
        ConfigManager(str(path))


def test_non_object_raises(tmp_path):
    with pytest.raises(ValueError):
        ConfigManager(_write_config(tmp_path, [1, 2, 3]))


@pytest.mark.parametrize("data", [
    {"server": {"port": 70000}},
    {"server": {"port": "8080"}},
    {"server": {"push_interval_sec": 0}},
    {"server": {"read_timeout_sec": -1}},
    {"sampler": {"max_processes": 0}},
    {"sampler": {"min_working_set_bytes": -5}},
    {"serializer": {"units": "kb"}},
])
def test_invalid_values_raise(tmp_path, data):
    with pytest.raises(ValueError):
        ConfigManager(_write_config(tmp_path, data))


def test_read_timeout_can_be_disabled(tmp_path):
    config = ConfigManager(_write_config(tmp_path, {"server": {"read_timeout_sec": None}}))

    assert config.get('server.read_timeout_sec') is None


def test_overrides_skip_none_and_revalidate():
    config = ConfigManager()

    config.apply_overrides({'server.port': 9000, 'server.host': None})

    assert config.get('server.port') == 9000
    assert config.get('server.host') == "0.0.0.0"

    with pytest.raises(ValueError):
        config.apply_overrides({'server.port': -1})


def test_rejected_overrides_leave_config_unchanged():
    config = ConfigManager()

    with pytest.raises(ValueError):
        config.apply_overrides({'server.host': "127.0.0.1", 'server.port': -1})

    assert config.get('server.port') == 8080
    assert config.get('server.host') == "0.0.0.0"
