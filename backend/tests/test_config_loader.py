"""Tests for YAML settings loading."""
import pytest

from fixed_assets.utils import config_loader


def test_bundled_settings():
    settings = config_loader.load_settings()
    assert settings["period_type"] == "monthly"
    assert config_loader.get_rounding_mode() == "ROUND_HALF_UP"
    assert config_loader.get_currency_places() == 2


def test_missing_keys_use_defaults(tmp_path, monkeypatch):
    path = tmp_path / "partial.yaml"
    path.write_text("rounding: ROUND_HALF_EVEN\n")
    monkeypatch.setenv("DEPRECIATION_CONFIG_PATH", str(path))

    assert config_loader.get_rounding_mode() == "ROUND_HALF_EVEN"
    assert config_loader.get_period_type() == "monthly"
    assert config_loader.get_cors_origins() == ["*"]


def test_unknown_rounding_mode(tmp_path, monkeypatch):
    path = tmp_path / "bad.yaml"
    path.write_text("rounding: ROUND_SOMETIMES\n")
    monkeypatch.setenv("DEPRECIATION_CONFIG_PATH", str(path))

    with pytest.raises(ValueError):
        config_loader.load_settings()


def test_missing_file(tmp_path, monkeypatch):
    monkeypatch.setenv("DEPRECIATION_CONFIG_PATH", str(tmp_path / "absent.yaml"))
    with pytest.raises(FileNotFoundError):
        config_loader.load_settings()


def test_unknown_period_type(tmp_path, monkeypatch):
    path = tmp_path / "weekly.yaml"
    path.write_text("period_type: weekly\n")
    monkeypatch.setenv("DEPRECIATION_CONFIG_PATH", str(path))

    with pytest.raises(ValueError):
        config_loader.load_settings()
