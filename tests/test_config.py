"""Tests for YAML config loading and CLI overrides."""

import argparse

import pytest

import constants
from cli_config import apply_cli_overrides, load_config
from constants import Constants, _load_yaml_config, apply_config


@pytest.fixture(autouse=True)
def restore_constants(monkeypatch, tmp_path):
    """Snapshot every tunable so tests may mutate Constants freely."""
    for attr in constants.CONFIG_KEYS.values():
        monkeypatch.setattr(Constants, attr, getattr(Constants, attr))
    monkeypatch.setenv(Constants.CONFIG_DIR_ENV, str(tmp_path / "no-config"))
    monkeypatch.delenv(Constants.CONFIG_FILE_ENV, raising=False)
    monkeypatch.chdir(tmp_path)


def _ns(**kwargs):
    defaults = {"CONFIG": None, "DX_PATH": None, "GRADLE_DIR": None, "MAX_WORKERS": None}
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


class TestYamlConfig:
    """Tests for _load_yaml_config() and apply_config()."""

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.yml"
        path.write_text("dexcount:\n  dx_path: /sdk/dx\n  max_workers: 4\n")
        cfg = _load_yaml_config(str(path))
        assert cfg == {"dexcount": {"dx_path": "/sdk/dx", "max_workers": 4}}

    def test_no_file(self):
        assert _load_yaml_config() == {}

    def test_default_location(self, tmp_path):
        (tmp_path / "dexcount.yml").write_text("dexcount:\n  gradle_version: '8.6'\n")
        assert _load_yaml_config()["dexcount"]["gradle_version"] == "8.6"

    def test_env_location(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yml"
        path.write_text("dexcount:\n  request_timeout: 5\n")
        monkeypatch.setenv(Constants.CONFIG_FILE_ENV, str(path))
        assert _load_yaml_config()["dexcount"]["request_timeout"] == 5

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("dexcount: [unclosed\n")
        assert _load_yaml_config(str(path)) == {}

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        assert _load_yaml_config(str(path)) == {}

    def test_apply(self):
        apply_config({"dexcount": {"dx_path": "/sdk/dx", "max_workers": "8", "resolve_timeout": 60}})
        assert Constants.DX_PATH == "/sdk/dx"
        assert Constants.MAX_WORKERS == 8
        assert Constants.RESOLVE_TIMEOUT == 60

    def test_apply_ignores_bad_integers_and_unknown_keys(self):
        before = Constants.REQUEST_TIMEOUT
        apply_config({"dexcount": {"request_timeout": "soon", "colour": "blue"}})
        assert Constants.REQUEST_TIMEOUT == before
        assert not hasattr(Constants, "colour")


class TestCliConfig:
    """Tests for load_config() and apply_cli_overrides()."""

    def test_load_config_applies(self, tmp_path):
        path = tmp_path / "c.yml"
        path.write_text("dexcount:\n  gradle_dir: /ws\n")
        load_config(_ns(CONFIG=str(path)))
        assert Constants.GRADLE_DIR_OVERRIDE == "/ws"

    def test_missing_explicit_config(self, tmp_path):
        assert load_config(_ns(CONFIG=str(tmp_path / "missing.yml"))) == {}

    def test_cli_wins(self, tmp_path):
        path = tmp_path / "c.yml"
        path.write_text("dexcount:\n  dx_path: /from/config\n  max_workers: 2\n")
        args = _ns(CONFIG=str(path), DX_PATH="/from/cli", MAX_WORKERS=6)
        load_config(args)
        apply_cli_overrides(args)
        assert Constants.DX_PATH == "/from/cli"
        assert Constants.MAX_WORKERS == 6

    def test_cli_absent_keeps_config(self, tmp_path):
        path = tmp_path / "c.yml"
        path.write_text("dexcount:\n  dx_path: /from/config\n")
        args = _ns(CONFIG=str(path))
        load_config(args)
        apply_cli_overrides(args)
        assert Constants.DX_PATH == "/from/config"
