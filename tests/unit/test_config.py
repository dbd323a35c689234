"""
Unit tests for configuration.
"""

import pytest

from switchyard.config import DEFAULTS, Config


class TestConfigAccess:
    """Tests for dotted-path access."""

    def test_defaults(self):
        """Test a new config carries the framework defaults."""
        config = Config()

        assert config.debug is False
        assert config.error is False
        assert config.disable_buffer is False
        assert config.timezone is None
        assert config.views == "views"
        assert config.log_format == "text"

    def test_defaults_are_not_shared(self):
        """Test configs don't share the module-level defaults."""
        Config().set("views", "elsewhere")

        assert DEFAULTS["views"] == "views"
        assert Config().views == "views"

    def test_dotted_set_and_get(self):
        """Test dotted keys create and read nested dicts."""
        config = Config()
        config.set("db.primary.host", "10.0.0.5")

        assert config.get("db.primary.host") == "10.0.0.5"
        assert config.get("db.primary") == {"host": "10.0.0.5"}
        assert config.db == {"primary": {"host": "10.0.0.5"}}

    def test_missing_keys(self):
        """Test missing keys read as None or the given default."""
        config = Config()

        assert config.get("nope") is None
        assert config.get("nope.deeper", 5) == 5
        assert config.nope is None

    def test_set_replaces_scalar_on_path(self):
        """Test a scalar in the way of a dotted path becomes a dict."""
        config = Config({"db": "sqlite"})
        config.set("db.host", "localhost")

        assert config.get("db") == {"host": "localhost"}

    def test_item_access(self):
        """Test mapping-style access."""
        config = Config()
        config["cache.ttl"] = 30

        assert config["cache.ttl"] == 30
        assert "cache.ttl" in config
        assert "cache.size" not in config

    def test_enabled_and_disabled_are_strict(self):
        """Test enabled/disabled only accept exact booleans."""
        config = Config({"a": True, "b": 1, "c": False, "d": 0})

        assert config.enabled("a")
        assert not config.enabled("b")
        assert config.disabled("c")
        assert not config.disabled("d")

    def test_private_attributes_raise(self):
        """Test underscore attributes aren't treated as settings."""
        with pytest.raises(AttributeError):
            Config()._missing

    def test_to_dict_is_a_copy(self):
        """Test to_dict() can't mutate the config."""
        config = Config()
        data = config.to_dict()
        data["views"] = "changed"

        assert config.views == "views"


class TestConfigFromEnv:
    """Tests for loading from environment variables."""

    def test_reads_prefixed_variables(self):
        """Test SWITCHYARD_* variables are parsed."""
        config = Config.from_env({
            "SWITCHYARD_DEBUG": "yes",
            "SWITCHYARD_DISABLE_BUFFER": "0",
            "SWITCHYARD_TIMEZONE": "Europe/Paris",
            "SWITCHYARD_VIEWS": "templates",
            "SWITCHYARD_LOG_LEVEL": "debug",
            "SWITCHYARD_LOG_FORMAT": "JSON",
        })

        assert config.debug is True
        assert config.disable_buffer is False
        assert config.timezone == "Europe/Paris"
        assert config.views == "templates"
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_custom_prefix(self):
        """Test the prefix can be changed."""
        config = Config.from_env({"SHOP_DEBUG": "true"}, prefix="SHOP_")

        assert config.debug is True

    def test_unset_variables_keep_defaults(self):
        """Test missing variables leave defaults alone."""
        assert Config.from_env({}).to_dict() == Config().to_dict()


class TestConfigValidate:
    """Tests for validation."""

    def test_defaults_are_valid(self):
        """Test the default configuration validates."""
        Config().validate()

    def test_invalid_log_level(self):
        """Test unknown log levels are rejected."""
        with pytest.raises(ValueError, match="log_level"):
            Config({"log_level": "LOUD"}).validate()

    def test_log_level_case_insensitive(self):
        """Test lowercase level names are accepted."""
        Config({"log_level": "warning"}).validate()

    def test_invalid_log_format(self):
        """Test unknown log formats are rejected."""
        with pytest.raises(ValueError, match="log_format"):
            Config({"log_format": "xml"}).validate()

    def test_views_must_be_a_path(self):
        """Test views must be a string."""
        with pytest.raises(ValueError, match="views"):
            Config({"views": None}).validate()
