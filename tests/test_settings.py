"""
Tests for environment-driven settings.
"""

import pytest

from sandbox_agent.config.settings import DEFAULT_PRELOAD_SCRIPT_SRC, Settings
from sandbox_agent.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for key in (
        "OPENAI_API_KEY",
        "APPLY_DIFF_API_KEY",
        "ROUTER_TYPE",
        "MAX_TOOL_REPAIRS",
        "REMOTE_TIMEOUT_SECONDS",
        "API_TOKENS",
        "PRELOAD_SCRIPT_SRC",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    s = Settings()
    assert s.router_type == "app"
    assert s.max_tool_repairs == 1
    assert s.remote_timeout_seconds == 30.0
    assert s.preload_script_src == DEFAULT_PRELOAD_SCRIPT_SRC
    assert s.api_tokens == {}


def test_apply_diff_key_defaults_to_openai_key(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    assert Settings().apply_diff_api_key == "sk-test"


def test_api_tokens(clean_env):
    clean_env.setenv("API_TOKENS", "abc:user-1, def:user-2")
    assert Settings().api_tokens == {"abc": "user-1", "def": "user-2"}


@pytest.mark.parametrize(
    "key, value",
    [
        ("ROUTER_TYPE", "hash"),
        ("MAX_TOOL_REPAIRS", "one"),
        ("REMOTE_TIMEOUT_SECONDS", "soon"),
        ("API_TOKENS", "no-separator"),
    ],
)
def test_invalid_values(clean_env, key, value):
    clean_env.setenv(key, value)
    with pytest.raises(ConfigurationError):
        Settings()


def test_openai_key_required_on_demand(clean_env):
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        Settings().require_openai_api_key()
