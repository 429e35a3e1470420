"""Tests for the OSC bridge configuration."""
import argparse
import pytest
from pathlib import Path

from sample_lookup.errors import ConfigLoadError, ErrorCode
from sample_lookup.root_store import ROOT_CONFIG_FILENAME
from sample_lookup.server.config import OSCAddresses, ServerConfig, resolve_config


class TestServerConfig:
    """Defaults and computed fields."""

    def test_defaults(self):
        config = ServerConfig()
        assert config.recv_port == 9000
        assert config.send_port == 9001
        assert config.host == "127.0.0.1"
        assert config.catalog_path is None
        assert config.root_config_path is None

    def test_root_config_defaults_next_to_catalog(self, tmp_path):
        config = ServerConfig(catalog_path=str(tmp_path / "catalog.csv"))
        assert Path(config.root_config_path) == tmp_path / ROOT_CONFIG_FILENAME

    def test_explicit_root_config_is_kept(self, tmp_path):
        config = ServerConfig(catalog_path="catalog.csv", root_config_path=str(tmp_path / "r.txt"))
        assert config.root_config_path == str(tmp_path / "r.txt")


class TestFromEnv:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SLK_RECV_PORT", "7400")
        monkeypatch.setenv("SLK_SEND_PORT", "7401")
        monkeypatch.setenv("SLK_CATALOG", "/data/catalog.csv")
        monkeypatch.setenv("SLK_VERBOSE", "yes")

        config = ServerConfig.from_env()

        assert config.recv_port == 7400
        assert config.send_port == 7401
        assert config.catalog_path == "/data/catalog.csv"
        assert config.verbose is True

    def test_invalid_port(self, monkeypatch):
        monkeypatch.setenv("SLK_RECV_PORT", "not-a-port")
        with pytest.raises(ConfigLoadError):
            ServerConfig.from_env()


class TestFromYaml:

    def test_loads_mapping(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text(
            "recv_port: 7500\ncatalog_path: /data/catalog.csv\nverbose: true\n",
            encoding="utf-8",
        )
        config = ServerConfig.from_yaml(str(path))
        assert config.recv_port == 7500
        assert config.catalog_path == "/data/catalog.csv"
        assert config.verbose is True

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("", encoding="utf-8")
        assert ServerConfig.from_yaml(str(path)).recv_port == 9000

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigLoadError) as exc:
            ServerConfig.from_yaml(str(tmp_path / "missing.yaml"))
        assert exc.value.code == ErrorCode.INVALID_CONFIG

    def test_unknown_keys(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("recv_port: 1\nbogus: 2\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError, match="bogus"):
            ServerConfig.from_yaml(str(path))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("recv_port: [1, 2\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            ServerConfig.from_yaml(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            ServerConfig.from_yaml(str(path))


class TestOSCAddresses:

    def test_addresses_are_osc_paths(self):
        addresses = [v for k, v in vars(OSCAddresses).items() if k.isupper()]
        assert addresses
        assert all(a.startswith("/") for a in addresses)
        assert len(addresses) == len(set(addresses))


def cli_args(**overrides):
    values = dict(config=None, catalog=None, port=None, send_port=None, host=None, root_config=None, verbose=False)
    values.update(overrides)
    return argparse.Namespace(**values)


class TestResolveConfig:
    """Command-line options layered over YAML or environment."""

    def test_cli_overrides_yaml(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("catalog_path: /data/a.csv\nrecv_port: 7500\n", encoding="utf-8")

        config = resolve_config(cli_args(config=str(path), port=7600, verbose=True))

        assert config.catalog_path == "/data/a.csv"
        assert config.recv_port == 7600
        assert config.verbose is True

    def test_replaced_catalog_moves_derived_sidecar(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("catalog_path: /data/a.csv\n", encoding="utf-8")

        config = resolve_config(cli_args(config=str(path), catalog="/other/b.csv"))

        assert config.catalog_path == "/other/b.csv"
        assert Path(config.root_config_path) == Path("/other") / ROOT_CONFIG_FILENAME

    def test_explicit_sidecar_is_kept(self, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text("catalog_path: /data/a.csv\nroot_config_path: /etc/root.txt\n", encoding="utf-8")

        config = resolve_config(cli_args(config=str(path), catalog="/other/b.csv"))

        assert config.root_config_path == "/etc/root.txt"

    def test_environment_is_used_without_config_file(self, monkeypatch):
        monkeypatch.setenv("SLK_CATALOG", "/env/catalog.csv")
        monkeypatch.setenv("SLK_SEND_PORT", "7700")
        config = resolve_config(cli_args())
        assert config.catalog_path == "/env/catalog.csv"
        assert config.send_port == 7700
