"""Unit tests for configuration loading and the config context."""

from pathlib import Path

import pytest

from src.user_directory.runtime.config.config_data import (
    ConfigData,
    RedisConfig,
    SearchConfig,
)
from src.user_directory.runtime.config.config_template import (
    load_templated_yaml,
    substitute_env_vars,
)
from src.user_directory.runtime.context import get_config, set_config, with_context

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class TestConfigData:
    """Test defaults and validation of the configuration models."""

    def test_defaults(self):
        config = ConfigData()

        assert config.cache.search_ttl_seconds == 60
        assert config.cache.invalidation_tags == ["users", "user-search", "index"]
        assert (config.search.min_per_page, config.search.max_per_page) == (10, 50)
        assert config.search.default_collection_limit == 20
        assert config.notifications.dashboard_limit == 6
        assert config.notifications.feed_limit == 10

    def test_search_bounds_must_be_ordered(self):
        with pytest.raises(ValueError):
            SearchConfig(min_per_page=60, max_per_page=50)

    def test_redis_connection_string_with_password(self):
        config = RedisConfig(url="redis://cache:6379/0", password="s3cret")

        assert config.connection_string == "redis://:s3cret@cache:6379/0"
        assert "s3cret" not in config.sanitized_connection_string


class TestTemplateSubstitution:
    """Test ${VAR} substitution."""

    def test_default_value(self, monkeypatch):
        monkeypatch.delenv("UD_TEST_VAR", raising=False)
        assert substitute_env_vars("x: ${UD_TEST_VAR:-fallback}") == "x: fallback"

    def test_environment_value(self, monkeypatch):
        monkeypatch.setenv("UD_TEST_VAR", "from-env")
        assert substitute_env_vars("x: ${UD_TEST_VAR:-fallback}") == "x: from-env"

    def test_required_missing_variable(self, monkeypatch):
        monkeypatch.delenv("UD_TEST_VAR", raising=False)
        with pytest.raises(ValueError):
            substitute_env_vars("x: ${UD_TEST_VAR}")

    def test_placeholders_in_comments_are_ignored(self, monkeypatch):
        monkeypatch.delenv("UD_TEST_VAR", raising=False)
        text = "# ${UD_TEST_VAR} is required\n  # indented ${UD_TEST_VAR}\nx: 1"

        assert substitute_env_vars(text) == "x: 1"


class TestLoadTemplatedYaml:
    def test_shipped_config_loads(self, monkeypatch):
        """The config.yaml at the project root loads with no variables set."""
        for name in ("VAR", "DATABASE_URL", "REDIS_ENABLED", "REDIS_URL", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        config = load_templated_yaml(PROJECT_ROOT / "config.yaml")

        assert config.cache.search_ttl_seconds == 60
        assert config.search.max_per_page == 50
        assert config.notifications.dashboard_limit == 6
        assert config.redis.enabled is False

    def test_missing_file_yields_defaults(self, tmp_path):
        config = load_templated_yaml(tmp_path / "absent.yaml")
        assert config == ConfigData()

    def test_loads_config_section(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UD_TTL", "30")
        path = tmp_path / "config.yaml"
        path.write_text(
            "config:\n"
            "  cache:\n"
            "    search_ttl_seconds: ${UD_TTL}\n"
            "  search:\n"
            "    max_per_page: 40\n"
        )

        config = load_templated_yaml(path)

        assert config.cache.search_ttl_seconds == 30
        assert config.search.max_per_page == 40
        assert config.search.min_per_page == 10

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("config:\n  cache:\n    search_ttl_seconds: 0\n")

        with pytest.raises(ValueError):
            load_templated_yaml(path)


class TestContext:
    """Test context overrides."""

    def test_with_context_overrides_only_set_fields(self):
        original = get_config()
        override = ConfigData()
        override.cache.search_ttl_seconds = 5

        with with_context(override):
            config = get_config()
            assert config.cache.search_ttl_seconds == 5
            assert config.search == original.search

        assert get_config() is original

    def test_with_context_none_is_noop(self):
        original = get_config()
        with with_context(None):
            assert get_config() is original

    def test_with_context_rejects_other_types(self):
        with pytest.raises(ValueError):
            with with_context({"cache": {}}):  # type: ignore[arg-type]
                pass

    def test_set_config(self):
        original = get_config()
        replacement = ConfigData()
        replacement.notifications.feed_limit = 3
        try:
            set_config(replacement)
            assert get_config().notifications.feed_limit == 3
        finally:
            set_config(original)
