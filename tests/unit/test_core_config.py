"""Tests for MaskingConfig and the process default."""

import pytest

from fluentmask.core.config import MaskingConfig, get_default_config, set_default_config
from fluentmask.core.types import PropertyRuleBehavior


class TestMaskingConfig:
    """Test MaskingConfig validation."""

    def test_defaults(self):
        """Test default values."""
        config = MaskingConfig()
        assert config.default_behavior is PropertyRuleBehavior.EXCLUDE
        assert config.regex_timeout_ms == 100.0
        assert config.output_format == "json"
        assert config.json_indent is None
        assert config.convert_types is True

    def test_behavior_from_string(self):
        """Test that behavior strings are parsed."""
        assert MaskingConfig(default_behavior="INCLUDE").default_behavior is PropertyRuleBehavior.INCLUDE

    @pytest.mark.parametrize(
        "kwargs,attr,expected",
        [
            ({"default_behavior": "everything"}, "default_behavior", PropertyRuleBehavior.EXCLUDE),
            ({"regex_timeout_ms": -1}, "regex_timeout_ms", 100.0),
            ({"regex_timeout_ms": True}, "regex_timeout_ms", 100.0),
            ({"output_format": "xml"}, "output_format", "json"),
            ({"output_format": "YAML"}, "output_format", "yaml"),
            ({"json_indent": -2}, "json_indent", None),
        ],
    )
    def test_invalid_values_fall_back(self, kwargs, attr, expected):
        """Test that invalid values are replaced by defaults."""
        assert getattr(MaskingConfig(**kwargs), attr) == expected


class TestFromEnvironment:
    """Test loading configuration from environment variables."""

    def test_reads_all_variables(self, monkeypatch):
        """Test that every variable is honored."""
        monkeypatch.setenv("FLUENTMASK_DEFAULT_BEHAVIOR", "remove")
        monkeypatch.setenv("FLUENTMASK_REGEX_TIMEOUT_MS", "250")
        monkeypatch.setenv("FLUENTMASK_OUTPUT_FORMAT", "yaml")
        monkeypatch.setenv("FLUENTMASK_JSON_INDENT", "2")
        monkeypatch.setenv("FLUENTMASK_CONVERT_TYPES", "FALSE")

        config = MaskingConfig.from_environment()

        assert config.default_behavior is PropertyRuleBehavior.REMOVE
        assert config.regex_timeout_ms == 250.0
        assert config.output_format == "yaml"
        assert config.json_indent == 2
        assert config.convert_types is False

    def test_unparseable_values_use_defaults(self, monkeypatch):
        """Test fallbacks for malformed numbers and booleans."""
        monkeypatch.setenv("FLUENTMASK_REGEX_TIMEOUT_MS", "soon")
        monkeypatch.setenv("FLUENTMASK_JSON_INDENT", "wide")
        monkeypatch.setenv("FLUENTMASK_CONVERT_TYPES", "maybe")

        config = MaskingConfig.from_environment()

        assert config.regex_timeout_ms == 100.0
        assert config.json_indent is None
        assert config.convert_types is True


class TestDefaultConfig:
    """Test the process-wide default."""

    def test_set_and_get(self):
        """Test replacing the default."""
        config = MaskingConfig(json_indent=4)
        set_default_config(config)
        assert get_default_config() is config

    def test_reset_reloads_from_environment(self, monkeypatch):
        """Test that None triggers an environment reload."""
        monkeypatch.setenv("FLUENTMASK_OUTPUT_FORMAT", "yaml")
        set_default_config(None)
        assert get_default_config().output_format == "yaml"
        assert get_default_config() is get_default_config()
