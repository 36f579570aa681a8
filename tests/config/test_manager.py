"""
Tests for ConfigManager.

Tests configuration loading from files and environment, precedence of
overrides, error reporting and building the configured MultiCache.
"""

import json

import pytest
import yaml

from tiercache.core.cache.multi import MultiCache
from tiercache.core.config.manager import ConfigManager
from tiercache.core.exceptions import ConfigurationError, ErrorCode
from tiercache.stores.memory import MemoryStore


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep default search paths and TIERCACHE_ variables out of tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    for name in ("TIERCACHE_MAX", "TIERCACHE_TTL", "TIERCACHE_CLONE_VALUES"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def yaml_config(tmp_path):
    """Two-tier configuration file."""
    path = tmp_path / "cache.yaml"
    path.write_text(yaml.safe_dump({
        "tiers": [
            {"store": "memory", "options": {"max": 100, "ttl": 60}},
            {"store": "memory", "options": {"max": 1000, "ttl": 3600}},
        ]
    }))
    return path


class TestLoading:
    """Test loading configuration sources."""

    def test_defaults_without_file(self):
        config = ConfigManager().load_config()
        assert len(config.tiers) == 1
        assert config.tiers[0].options == {}

    def test_load_yaml_file(self, yaml_config):
        manager = ConfigManager(yaml_config)
        config = manager.load_config()
        assert [tier.options["max"] for tier in config.tiers] == [100, 1000]
        assert manager.config is config

    def test_load_json_file(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps({"tiers": [{"options": {"ttl": 5}}]}))
        config = ConfigManager(path).load_config()
        assert config.tiers[0].options == {"ttl": 5}

    def test_default_search_path(self, tmp_path):
        (tmp_path / "tiercache.yaml").write_text("tiers:\n  - options:\n      max: 7\n")
        config = ConfigManager().load_config()
        assert config.tiers[0].options["max"] == 7

    def test_env_overrides_file(self, yaml_config, monkeypatch):
        monkeypatch.setenv("TIERCACHE_TTL", "30")
        monkeypatch.setenv("TIERCACHE_CLONE_VALUES", "no")
        config = ConfigManager(yaml_config).load_config()
        for tier in config.tiers:
            assert tier.options["ttl"] == 30.0
            assert tier.options["clone_values"] is False
        assert config.tiers[1].options["max"] == 1000

    def test_explicit_overrides_win(self, yaml_config, monkeypatch):
        monkeypatch.setenv("TIERCACHE_MAX", "50")
        config = ConfigManager(yaml_config).load_config(overrides={"max": 5, "ttl": None})
        assert [tier.options["max"] for tier in config.tiers] == [5, 5]
        assert config.tiers[0].options["ttl"] == 60

    def test_overrides_skip_external_tiers(self, tmp_path):
        path = tmp_path / "cache.yaml"
        path.write_text(yaml.safe_dump({
            "tiers": [{"store": "memory"}, {"store": "redis", "options": {"url": "redis://x"}}]
        }))
        config = ConfigManager(path).load_config(overrides={"max": 5})
        assert config.tiers[0].options == {"max": 5}
        assert config.tiers[1].options == {"url": "redis://x"}


class TestErrors:
    """Test configuration error reporting."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager(tmp_path / "missing.yaml").load_config()
        assert exc_info.value.error_code == ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("tiers: [unclosed")
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager(path).load_config()
        assert exc_info.value.error_code == ErrorCode.CONFIG_INVALID_FORMAT

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            ConfigManager(path).load_config()

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text(yaml.safe_dump({"tiers": [{"options": {"max": 0}}]}))
        with pytest.raises(ConfigurationError, match="validation failed"):
            ConfigManager(path).load_config()

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("TIERCACHE_MAX", "lots")
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager().load_config()
        assert exc_info.value.context.user_context["config_key"] == "TIERCACHE_MAX"
        assert exc_info.value.context.user_context["config_value"] == "lots"
        assert isinstance(exc_info.value.cause, ValueError)


class TestBuild:
    """Test building caches from configuration."""

    @pytest.mark.asyncio
    async def test_build_multi_cache(self, yaml_config):
        manager = ConfigManager(yaml_config)
        manager.load_config()
        multi = await manager.build()

        assert isinstance(multi, MultiCache)
        assert len(multi) == 2
        stores = [cache.store for cache in multi.caches]
        assert all(isinstance(store, MemoryStore) for store in stores)
        assert [store.max for store in stores] == [100, 1000]
        assert [store.default_ttl for store in stores] == [60, 3600]

    @pytest.mark.asyncio
    async def test_build_loads_defaults(self):
        multi = await ConfigManager().build()
        assert len(multi) == 1
        await multi.set("foo", "bar")
        assert await multi.get("foo") == "bar"

    @pytest.mark.asyncio
    async def test_build_unknown_store(self, tmp_path):
        path = tmp_path / "cache.yaml"
        path.write_text(yaml.safe_dump({"tiers": [{"store": "nonexistent"}]}))
        manager = ConfigManager(path)
        with pytest.raises(ConfigurationError) as exc_info:
            await manager.build()
        assert exc_info.value.error_code == ErrorCode.CONFIG_UNKNOWN_STORE


class TestSchema:
    """Test schema generation."""

    def test_generate_schema(self, tmp_path):
        output = tmp_path / "schema.json"
        schema = ConfigManager().generate_schema(output)
        assert "tiers" in schema["properties"]
        assert json.loads(output.read_text()) == schema
