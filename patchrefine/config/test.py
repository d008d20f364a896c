"""Tests for configuration management."""

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_environment_info,
    get_history_size,
    get_log_level,
    get_session_limit,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("REFINE_HISTORY_SIZE", raising=False)
        assert get_environment(EnvVar.REFINE_HISTORY_SIZE) == 5

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("MCP_PORT", "9999")
        assert get_environment(EnvVar.MCP_PORT, override=5000) == 5000

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("MCP_PORT", "12345")
        result = get_environment(EnvVar.MCP_PORT)
        assert result == 12345
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_invalid_int_falls_back_to_default(self, monkeypatch):
        """Unparseable integers return the default."""
        monkeypatch.setenv("REFINE_HISTORY_SIZE", "lots")
        assert get_environment(EnvVar.REFINE_HISTORY_SIZE) == 5

    @pytest.mark.unit
    def test_string_type(self, monkeypatch):
        """String type returns as-is."""
        monkeypatch.setenv("MCP_HOST", "127.0.0.1")
        assert get_environment(EnvVar.MCP_HOST) == "127.0.0.1"


class TestConvenienceFunctions:
    """Tests for typed convenience accessors."""

    @pytest.mark.unit
    def test_history_size_from_env(self, monkeypatch):
        monkeypatch.setenv("REFINE_HISTORY_SIZE", "8")
        assert get_history_size() == 8

    @pytest.mark.unit
    def test_history_size_rejects_non_positive(self, monkeypatch):
        """A zero-sized history would lose the patch being refined."""
        monkeypatch.setenv("REFINE_HISTORY_SIZE", "0")
        assert get_history_size() == 5

    @pytest.mark.unit
    def test_log_level_upper_cased(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"

    @pytest.mark.unit
    def test_session_limit_minimum(self):
        assert get_session_limit(override=0) == 1


class TestIntrospection:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_info_returns_env_config(self):
        info = get_environment_info(EnvVar.MCP_PORT)
        assert isinstance(info, EnvConfig)
        assert info.name == "MCP_PORT"
        assert info.var_type is int

    @pytest.mark.unit
    def test_list_by_category(self):
        service_vars = list_environment_variables("service")
        assert EnvVar.MCP_HOST in service_vars
        assert EnvVar.LOG_LEVEL not in service_vars

    @pytest.mark.unit
    def test_list_all(self):
        assert set(list_environment_variables()) == set(EnvVar)

    @pytest.mark.unit
    def test_every_variable_documented(self):
        for var in EnvVar:
            assert var.value.description
            assert var.value.name == var.name
