"""Tests for YAML config loading."""

import pytest

from offlinegate.config.loader import load_proxy_yaml, load_yaml
from offlinegate.config.schema import ProxyConfig


class TestLoadProxyYaml:
    def test_loads_valid_config(self, sample_proxy_yaml):
        config = load_proxy_yaml(sample_proxy_yaml)
        assert isinstance(config, ProxyConfig)
        assert config.origin == "https://app.example"
        assert config.generation.primary == "keypad-v3"
        assert config.max_image_entries == 10

    def test_defaults_applied(self, sample_proxy_yaml):
        config = load_proxy_yaml(sample_proxy_yaml)
        assert config.max_runtime_entries == 200
        assert config.persist_prefix == "persist-"
        assert config.skip_waiting is False

    def test_manifest_is_absolute(self, sample_proxy_yaml):
        config = load_proxy_yaml(sample_proxy_yaml)
        assert config.manifest == [
            "https://app.example/",
            "https://app.example/index.html",
            "https://app.example/offline.html",
        ]

    def test_overrides(self, sample_proxy_yaml):
        config = load_proxy_yaml(sample_proxy_yaml, version="v4", skip_waiting=None)
        assert config.version == "v4"
        assert config.skip_waiting is False

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_proxy_yaml(tmp_path / "nonexistent.yaml")

    def test_no_proxy_key(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("foo: bar\n")
        with pytest.raises(ValueError, match="missing top-level 'proxy' key"):
            load_proxy_yaml(path)

    def test_relative_origin_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("proxy:\n  origin: /just/a/path\n")
        with pytest.raises(ValueError, match="absolute URL"):
            load_proxy_yaml(path)

    def test_negative_limit_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("proxy:\n  max_image_entries: -1\n")
        with pytest.raises(ValueError):
            load_proxy_yaml(path)


class TestLoadYaml:
    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="Expected YAML mapping"):
            load_yaml(path)


class TestProxyConfig:
    def test_extensions_normalised(self):
        config = ProxyConfig(image_extensions=[".PNG", "Jpg", ""])
        assert config.image_extensions == ["png", "jpg"]

    def test_absolute_resolves_against_origin(self):
        config = ProxyConfig(origin="https://app.example")
        assert config.absolute("/offline.html") == "https://app.example/offline.html"
        assert config.absolute("https://cdn.example/x") == "https://cdn.example/x"
