"""
Tests for flightcapture.config — defaults, overrides and the JSON config file.
"""

import json

from flightcapture.config import EngineConfig, load_engine_config


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.headless is True
        assert config.viewport == {"width": 1920, "height": 1080}
        assert config.max_attempts == 3
        assert config.max_wait_ms == 60000
        assert config.stabilization_ms == 3000
        assert config.endpoint_name == "FetchFlights"
        assert config.search_deadline_ms is None

    def test_replace_leaves_original(self):
        config = EngineConfig()
        headed = config.replace(headless=False, max_wait_ms=5000)
        assert headed.headless is False
        assert headed.max_wait_ms == 5000
        assert config.headless is True

    def test_from_dict_ignores_unknown_keys(self):
        config = EngineConfig.from_dict({"max_attempts": 5, "comment": "ignored"})
        assert config.max_attempts == 5


class TestLoadEngineConfig:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "engine-config.json"
        path.write_text(json.dumps({"headless": False, "proxy": "http://127.0.0.1:8080"}))
        config = load_engine_config(path)
        assert config.headless is False
        assert config.proxy == "http://127.0.0.1:8080"
        assert config.max_attempts == 3

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_engine_config(tmp_path / "missing.json") == EngineConfig()

    def test_default_path_is_cached(self):
        assert load_engine_config() is load_engine_config()
