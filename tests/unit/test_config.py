"""Unit tests for harness configuration loading."""

import pytest

from selftest.config import HarnessConfig, load_config
from selftest.constants import FailurePolicy, Verbosity
from selftest.constants import TestClass as GroupClass


class TestLoadConfigDefaults:
    """Test built-in defaults."""

    def test_no_overrides_returns_defaults(self) -> None:
        """Test defaults match a freshly initialised harness."""
        config = load_config()

        assert isinstance(config, HarnessConfig)
        assert config.test_class == GroupClass.AUTO
        assert config.verbosity == Verbosity.ALL
        assert config.failure_policy == FailurePolicy.ABORT


class TestLoadConfigOverrides:
    """Test mapping and dotlist overrides."""

    def test_mapping_override_with_names(self) -> None:
        """Test enum fields accept member names."""
        config = load_config({"verbosity": "NORMAL", "test_class": "MANUAL"})

        assert config.verbosity == Verbosity.NORMAL
        assert config.test_class == GroupClass.MANUAL
        assert config.failure_policy == FailurePolicy.ABORT

    def test_mapping_override_with_members(self) -> None:
        """Test enum fields accept enum members."""
        config = load_config({"failure_policy": FailurePolicy.CONTINUE})
        assert config.failure_policy == FailurePolicy.CONTINUE

    def test_dotlist_override(self) -> None:
        """Test dotlist entries are parsed."""
        config = load_config(["verbosity=SILENT", "test_class=ALL"])

        assert config.verbosity == Verbosity.SILENT
        assert config.test_class == GroupClass.ALL

    def test_empty_mapping_returns_defaults(self) -> None:
        """Test an empty override mapping changes nothing."""
        assert load_config({}) == HarnessConfig()


class TestLoadConfigErrors:
    """Test invalid overrides."""

    def test_unknown_field_raises_value_error(self) -> None:
        """Test unknown keys are rejected."""
        with pytest.raises(ValueError, match="Invalid harness configuration"):
            load_config({"colour": "red"})

    def test_invalid_enum_value_raises_value_error(self) -> None:
        """Test values outside the enum are rejected."""
        with pytest.raises(ValueError, match="Invalid harness configuration"):
            load_config(["verbosity=LOUD"])
