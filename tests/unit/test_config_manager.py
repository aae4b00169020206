"""
Unit tests for ConfigManager and the static Config settings.

YAML overlays are written to pytest's tmp_path; the shipped `config/`
directory is checked against the built-in balance defaults.
"""

from pathlib import Path

import pytest

from apiary.core.config.config import Config, Environment, StorageBackend
from apiary.core.config.manager import ConfigManager
from apiary.modules.shared.constants import BALANCE_DEFAULTS

REPO_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


@pytest.mark.unit
class TestDotAccess:
    def test_nested_lookup(self, config_manager):
        assert config_manager.get("rarity.weights.common") == 60
        assert config_manager.get("rewards.profiles.buzz-race.honey_time_divisor") == 4

    def test_missing_key_returns_default(self, config_manager):
        assert config_manager.get("rarity.weights.mythic", 1) == 1
        assert config_manager.get("rarity.weights.common.deeper", "x") == "x"

    def test_none_value_returns_default(self, config_manager):
        assert config_manager.get("rewards.profiles.memory-match.fragment_time_divisor", 7) == 7

    def test_returned_values_are_copies(self, config_manager):
        weights = config_manager.get("rarity.weights")
        weights["common"] = 0

        assert config_manager.get("rarity.weights.common") == 60

    def test_override_merges_into_defaults(self, config_manager):
        config_manager.set_override("rarity.weights.common", 40)

        assert config_manager.get("rarity.weights.common") == 40
        assert config_manager.get("rarity.weights.rare") == 10

    def test_top_level_keys(self, config_manager):
        assert sorted(config_manager.get_all_keys()) == ["hive", "perks", "rarity", "rewards"]


@pytest.mark.unit
class TestYamlOverlay:
    def test_yaml_overrides_defaults(self, tmp_path):
        (tmp_path / "hive.yaml").write_text("hive:\n  room_unlock_step: 3\n", encoding="utf-8")
        manager = ConfigManager(defaults=BALANCE_DEFAULTS, config_dir=tmp_path)

        manager.load()

        assert manager.get("hive.room_unlock_step") == 3
        assert manager.get("hive.experience_per_level") == 200
        assert manager.health_snapshot()["yaml_files_loaded"] == 1

    def test_nested_directories_are_scanned(self, tmp_path):
        nested = tmp_path / "events" / "spring"
        nested.mkdir(parents=True)
        (nested / "rarity.yml").write_text(
            "rarity:\n  weights:\n    legendary: 9\n", encoding="utf-8"
        )
        manager = ConfigManager(defaults=BALANCE_DEFAULTS, config_dir=tmp_path)

        assert manager.get("rarity.weights.legendary") == 9

    def test_overrides_beat_yaml(self, tmp_path):
        (tmp_path / "hive.yaml").write_text("hive:\n  room_unlock_step: 3\n", encoding="utf-8")
        manager = ConfigManager(
            defaults=BALANCE_DEFAULTS,
            config_dir=tmp_path,
            overrides={"hive": {"room_unlock_step": 8}},
        )

        assert manager.get("hive.room_unlock_step") == 8

    def test_broken_yaml_is_skipped(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("hive: [unclosed\n", encoding="utf-8")
        (tmp_path / "good.yaml").write_text("hive:\n  room_unlock_step: 4\n", encoding="utf-8")
        manager = ConfigManager(defaults=BALANCE_DEFAULTS, config_dir=tmp_path)

        manager.load()

        assert manager.get("hive.room_unlock_step") == 4
        snapshot = manager.health_snapshot()
        assert (snapshot["yaml_files_loaded"], snapshot["yaml_files_failed"]) == (1, 1)

    def test_non_mapping_root_is_ignored(self, tmp_path):
        (tmp_path / "list.yaml").write_text("- 1\n- 2\n", encoding="utf-8")
        manager = ConfigManager(defaults=BALANCE_DEFAULTS, config_dir=tmp_path)

        assert manager.get("hive.room_unlock_step") == 5

    def test_missing_directory_uses_defaults(self, tmp_path):
        manager = ConfigManager(defaults=BALANCE_DEFAULTS, config_dir=tmp_path / "absent")

        assert manager.get("rarity.weights.epic") == 7

    def test_shipped_config_matches_defaults(self):
        manager = ConfigManager(defaults={}, config_dir=REPO_CONFIG_DIR)

        for top_level in BALANCE_DEFAULTS:
            assert manager.get(top_level) == BALANCE_DEFAULTS[top_level]


@pytest.mark.unit
class TestStaticConfig:
    def test_reload_reads_environment(self, monkeypatch):
        monkeypatch.setenv("APIARY_ENV", "production")
        monkeypatch.setenv("APIARY_STORAGE_BACKEND", "SQL")
        monkeypatch.setenv("APIARY_DATABASE_URL", "sqlite://")

        try:
            Config.reload()

            assert Config.ENVIRONMENT is Environment.PRODUCTION
            assert Config.is_production()
            assert Config.STORAGE_BACKEND is StorageBackend.SQL
            assert Config.DATABASE_URL == "sqlite://"
        finally:
            monkeypatch.undo()
            Config.reload()

    def test_unknown_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("APIARY_ENV", "moon")
        monkeypatch.setenv("APIARY_STORAGE_BACKEND", "floppy")

        try:
            Config.reload()

            assert Config.ENVIRONMENT is Environment.DEVELOPMENT
            assert Config.STORAGE_BACKEND is StorageBackend.MEMORY
        finally:
            monkeypatch.undo()
            Config.reload()

    def test_load_summary_tracks_sources(self, monkeypatch):
        monkeypatch.setenv("APIARY_REDIS_URL", "redis://cache:6379/1")

        try:
            Config.reload()
            summary = Config.get_load_summary()

            assert "APIARY_REDIS_URL" not in summary["defaults_used"]
            assert summary["from_environment"] >= 1
        finally:
            monkeypatch.undo()
            Config.reload()
