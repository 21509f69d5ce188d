"""Tests for runtime settings loading."""

from __future__ import annotations

import pytest
import yaml

from econcast.config import Settings, load_settings, sanitize_dict


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    import os

    for name in list(os.environ):
        if name.startswith("ECONCAST_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def yaml_file(tmp_path):
    path = tmp_path / "econcast.yaml"
    path.write_text(yaml.safe_dump({
        "database": {"path": str(tmp_path / "from_yaml.db")},
        "logging": {"level": "DEBUG", "json": True},
        "scoring": {"leaderboard": {"unscored_last": True}, "rounding": {"brier_places": 4}},
    }))
    return path


class TestLoadSettings:
    def test_defaults(self):
        s = load_settings()
        assert isinstance(s, Settings)
        assert s.database.path.endswith("econcast.db")
        assert s.logging.level == "INFO"
        assert s.logging.json_logs is False
        assert s.scoring.rounding.brier_places == 3

    def test_yaml_overrides(self, yaml_file, tmp_path):
        s = load_settings(yaml_file)
        assert s.database.path == str(tmp_path / "from_yaml.db")
        assert s.logging.level == "DEBUG"
        assert s.logging.json_logs is True
        assert s.scoring.leaderboard.unscored_last is True
        assert s.scoring.rounding.brier_places == 4
        assert s.scoring.rounding.accuracy_places == 1

    def test_env_beats_yaml(self, yaml_file, monkeypatch):
        monkeypatch.setenv("ECONCAST_LOGGING__LEVEL", "WARNING")
        monkeypatch.setenv("ECONCAST_SCORING__ROUNDING__BRIER_PLACES", "2")
        s = load_settings(yaml_file)
        assert s.logging.level == "WARNING"
        assert s.scoring.rounding.brier_places == 2
        assert s.logging.json_logs is True

    def test_explicit_overrides_win(self, yaml_file, monkeypatch):
        monkeypatch.setenv("ECONCAST_LOGGING__LEVEL", "WARNING")
        s = load_settings(yaml_file, logging={"level": "ERROR"})
        assert s.logging.level == "ERROR"
        assert s.logging.json_logs is True

    def test_settings_read_env_directly(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ECONCAST_DATABASE__PATH", str(tmp_path / "env.db"))
        monkeypatch.setenv("ECONCAST_LOGGING__JSON", "true")
        s = Settings()
        assert s.database.path == str(tmp_path / "env.db")
        assert s.logging.json_logs is True

    def test_unknown_yaml_sections_ignored(self, tmp_path):
        path = tmp_path / "extra.yaml"
        path.write_text(yaml.safe_dump({"metrics": {"port": 9000}, "logging": {"level": "DEBUG"}}))
        s = load_settings(path)
        assert s.logging.level == "DEBUG"
        assert not hasattr(s, "metrics")

    def test_yaml_does_not_leak_between_loads(self, yaml_file):
        assert load_settings(yaml_file).logging.level == "DEBUG"
        assert load_settings().logging.level == "INFO"

    def test_non_mapping_yaml_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="must contain a mapping"):
            load_settings(path)


class TestSanitizeDict:
    def test_redacts_secrets(self):
        out = sanitize_dict({"database": {"path": "x.db", "password": "hunter2"}, "api_key": "k"})
        assert out["database"] == {"path": "x.db", "password": "***"}
        assert out["api_key"] == "***"
