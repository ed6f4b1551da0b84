"""Tests for EvalsrvSettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest
from pydantic import ValidationError

from evalsrv.config.settings import EvalsrvSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("EVALSRV_CONFIG", "EVALSRV_QUIET", "EVALSRV_SERVER__PORT"):
        monkeypatch.delenv(key, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = EvalsrvSettings.from_cli(start=tmp_path)
        assert settings.config_path is None
        assert settings.server.host == "127.0.0.1"
        assert settings.server.port == 9999
        assert settings.server.evaluator == "python"
        assert settings.server.reuse_address is True
        assert settings.client.port == 9999
        assert settings.client.connect_timeout == 5.0

    def test_frozen(self, tmp_path: Path) -> None:
        settings = EvalsrvSettings.from_cli(start=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "evalsrv.toml").write_text(
            '[server]\nport = 9100\nevaluator = "arithmetic"\n'
        )
        settings = EvalsrvSettings.from_cli(start=tmp_path)
        assert settings.server.port == 9100
        assert settings.server.evaluator == "arithmetic"
        assert settings.server.host == "127.0.0.1"  # default preserved

    def test_discovered_from_subdirectory(self, tmp_path: Path) -> None:
        (tmp_path / "evalsrv.toml").write_text("[client]\nport = 7000\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        settings = EvalsrvSettings.from_cli(start=nested)
        assert settings.client.port == 7000
        assert settings.config_path == (tmp_path / "evalsrv.toml").resolve()

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[server]\nhost = "0.0.0.0"\n')
        settings = EvalsrvSettings.from_cli(config_path=str(custom))
        assert settings.server.host == "0.0.0.0"
        assert settings.config_path == custom

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "evalsrv.toml").write_text("[server\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            EvalsrvSettings.from_cli(start=tmp_path)

    def test_out_of_range_port_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "evalsrv.toml").write_text("[server]\nport = 70000\n")
        with pytest.raises(ValidationError):
            EvalsrvSettings.from_cli(start=tmp_path)


class TestPriority:
    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EVALSRV_QUIET", "true")
        settings = EvalsrvSettings.from_cli(start=tmp_path)
        assert settings.quiet is True

    def test_nested_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "evalsrv.toml").write_text("[server]\nport = 9100\n")
        monkeypatch.setenv("EVALSRV_SERVER__PORT", "9200")
        settings = EvalsrvSettings.from_cli(start=tmp_path)
        assert settings.server.port == 9200

    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = EvalsrvSettings.from_cli(start=tmp_path, verbose=True, json_output=True)
        assert settings.verbose is True
        assert settings.json_output is True
