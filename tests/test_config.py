"""
Tests for the reload configuration system.
"""
import os
import tempfile

import pytest

from reload_engine.config import (
    PRESETS,
    ReloadConfig,
    get_preset,
    list_presets,
)


class TestReloadConfig:
    """Test ReloadConfig dataclass."""

    def test_default_values(self):
        config = ReloadConfig()
        assert config.reload_priority == 9.1
        assert config.loadout_high_priority == 9.2
        assert config.loadout_low_priority == 3.0
        assert config.respect_draft is True

    def test_priority_above_high_tier_rejected(self):
        with pytest.raises(ValueError):
            ReloadConfig(reload_priority=9.5)

    def test_priority_below_low_tier_rejected(self):
        with pytest.raises(ValueError):
            ReloadConfig(reload_priority=2.0)

    def test_priority_equal_to_tier_rejected(self):
        with pytest.raises(ValueError):
            ReloadConfig(reload_priority=9.2)

    def test_from_dict_ignores_unknown_keys(self):
        config = ReloadConfig.from_dict({"reload_priority": 8.0, "color": "red"})
        assert config.reload_priority == 8.0

    def test_save_and_load_json(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "reload.json")
            ReloadConfig(reload_priority=7.5, respect_draft=False).save(path)

            loaded = ReloadConfig.load(path)
            assert loaded is not None
            assert loaded.reload_priority == 7.5
            assert loaded.respect_draft is False

    def test_save_and_load_yaml(self, tmp_path):
        path = str(tmp_path / "nested" / "reload.yaml")
        ReloadConfig(reload_priority=4.0).save(path)

        loaded = ReloadConfig.load(path)
        assert loaded is not None
        assert loaded.reload_priority == 4.0

    def test_load_missing_returns_none(self):
        assert ReloadConfig.load("/nonexistent/reload.json") is None

    def test_load_corrupted_returns_none(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{ not json")
        assert ReloadConfig.load(str(path)) is None

    def test_load_out_of_band_returns_none(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("reload_priority: 20.0\n")
        assert ReloadConfig.load(str(path)) is None


class TestPresets:

    def test_presets_listed(self):
        names = list_presets()
        assert "default" in names
        assert set(names) == set(PRESETS)

    def test_get_preset_case_insensitive(self):
        assert get_preset("EAGER") is PRESETS["eager"]

    def test_unknown_preset(self):
        assert get_preset("nope") is None

    def test_presets_stay_in_band(self):
        for config in PRESETS.values():
            assert config.loadout_low_priority < config.reload_priority < config.loadout_high_priority
