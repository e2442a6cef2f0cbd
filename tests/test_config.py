"""Tests for the configuration system."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from src.core.config import PROJECT_ROOT, Settings, load_settings, request_from_settings
from src.core.connectivity import NetworkType
from src.host.interfaces import NetworkCapability


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove observer env vars so tests start clean."""
    for key in ["APP_ID", "NETWORK_TRANSPORTS", "LOG_LEVEL"]:
        monkeypatch.delenv(key, raising=False)


def _empty_env(tmp_path: Path) -> Path:
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return env_file


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_hardcoded_defaults_when_no_yaml(self, tmp_path: Path) -> None:
        settings = load_settings(
            env_path=_empty_env(tmp_path), yaml_path=tmp_path / "nonexistent.yaml"
        )
        assert settings.app_id == "netwatch"
        assert settings.transports == (NetworkType.WIFI, NetworkType.CELLULAR)
        assert settings.log_level == "INFO"

    def test_loads_from_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("APP_ID=com.example.app\nLOG_LEVEL=debug\n")

        settings = load_settings(env_path=env_file, yaml_path=tmp_path / "none.yaml")
        assert settings.app_id == "com.example.app"
        assert settings.log_level == "DEBUG"

    def test_defaults_from_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "default.yaml"
        yaml_file.write_text(dedent("""\
            app:
              id: from-yaml
            network:
              transports: [ethernet, wifi]
        """))

        settings = load_settings(env_path=_empty_env(tmp_path), yaml_path=yaml_file)
        assert settings.app_id == "from-yaml"
        assert settings.transports == (NetworkType.ETHERNET, NetworkType.WIFI)

    def test_env_overrides_yaml(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("NETWORK_TRANSPORTS=cellular, vpn\n")

        yaml_file = tmp_path / "default.yaml"
        yaml_file.write_text(dedent("""\
            network:
              transports: [wifi]
        """))

        settings = load_settings(env_path=env_file, yaml_path=yaml_file)
        assert settings.transports == (NetworkType.CELLULAR, NetworkType.VPN)

    def test_yaml_transport_string_is_split(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "default.yaml"
        yaml_file.write_text('network:\n  transports: "ethernet, vpn"\n')

        settings = load_settings(env_path=_empty_env(tmp_path), yaml_path=yaml_file)
        assert settings.transports == (NetworkType.ETHERNET, NetworkType.VPN)

    def test_yaml_transport_scalar(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "default.yaml"
        yaml_file.write_text("network:\n  transports: cellular\n")

        settings = load_settings(env_path=_empty_env(tmp_path), yaml_path=yaml_file)
        assert settings.transports == (NetworkType.CELLULAR,)

    def test_blank_transport_entries_ignored(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("NETWORK_TRANSPORTS", " wifi, ,cellular,")
        settings = load_settings(env_path=_empty_env(tmp_path), yaml_path=tmp_path / "x.yaml")
        assert settings.transports == (NetworkType.WIFI, NetworkType.CELLULAR)

    def test_null_yaml_value_falls_back_to_default(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "default.yaml"
        yaml_file.write_text("network:\n  transports:\n")

        settings = load_settings(env_path=_empty_env(tmp_path), yaml_path=yaml_file)
        assert settings.transports == (NetworkType.WIFI, NetworkType.CELLULAR)

    def test_duplicate_transports_collapsed(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NETWORK_TRANSPORTS", "wifi,WIFI,cellular")
        settings = load_settings(env_path=_empty_env(tmp_path), yaml_path=tmp_path / "x.yaml")
        assert settings.transports == (NetworkType.WIFI, NetworkType.CELLULAR)

    def test_unknown_transport_raises(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NETWORK_TRANSPORTS", "wifi,bluetooth")
        with pytest.raises(ValueError, match="Unknown network transport 'bluetooth'"):
            load_settings(env_path=_empty_env(tmp_path), yaml_path=tmp_path / "x.yaml")

    def test_none_transport_raises(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NETWORK_TRANSPORTS", "none")
        with pytest.raises(ValueError, match="cannot be requested"):
            load_settings(env_path=_empty_env(tmp_path), yaml_path=tmp_path / "x.yaml")

    def test_empty_transport_list_raises(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "default.yaml"
        yaml_file.write_text("network:\n  transports: []\n")
        with pytest.raises(ValueError, match="at least one transport"):
            load_settings(env_path=_empty_env(tmp_path), yaml_path=yaml_file)

    def test_empty_app_id_raises(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "default.yaml"
        yaml_file.write_text("app:\n  id: '  '\n")
        with pytest.raises(ValueError, match="APP_ID must not be empty"):
            load_settings(env_path=_empty_env(tmp_path), yaml_path=yaml_file)

    def test_shipped_default_yaml_loads(self, tmp_path: Path) -> None:
        settings = load_settings(
            env_path=_empty_env(tmp_path),
            yaml_path=PROJECT_ROOT / "config" / "default.yaml",
        )
        assert settings.app_id == "netwatch"
        assert settings.transports == (NetworkType.WIFI, NetworkType.CELLULAR)

    def test_settings_is_frozen(self, tmp_path: Path) -> None:
        settings = load_settings(env_path=_empty_env(tmp_path), yaml_path=tmp_path / "x.yaml")
        with pytest.raises(AttributeError):
            settings.app_id = "other"  # type: ignore[misc]


class TestRequestFromSettings:
    def test_builds_internet_request(self) -> None:
        settings = Settings(
            app_id="app",
            transports=(NetworkType.WIFI,),
            log_level="INFO",
        )
        request = request_from_settings(settings)
        assert request.transports == (NetworkType.WIFI,)
        assert NetworkCapability.INTERNET in request.capabilities
        assert NetworkCapability.NOT_RESTRICTED in request.capabilities
