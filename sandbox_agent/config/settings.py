"""
Configuration settings for the application.
"""

import os

from dotenv import load_dotenv

from sandbox_agent.exceptions import ConfigurationError

# Load environment variables from .env file
_ = load_dotenv()

DEFAULT_PRELOAD_SCRIPT_SRC = (
    "https://cdn.jsdelivr.net/gh/onlook-dev/onlook@main/apps/web/client/public/"
    "onlook-preload-script.js"
)


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.openai_api_key: str = self._get_env("OPENAI_API_KEY", "")
        self.openai_model: str = self._get_env("OPENAI_MODEL", "gpt-4o-mini")
        self.openai_api_base: str = self._get_env(
            "OPENAI_API_BASE", "https://api.openai.com/v1"
        )

        # Fast-apply model used by the edit tool (OpenAI-compatible endpoint)
        self.apply_diff_api_key: str = self._get_env(
            "APPLY_DIFF_API_KEY", self.openai_api_key
        )
        self.apply_diff_model: str = self._get_env("APPLY_DIFF_MODEL", "morph-v3-large")
        self.apply_diff_api_base: str = self._get_env(
            "APPLY_DIFF_API_BASE", "https://api.morphllm.com/v1"
        )

        self.sandbox_root: str = os.path.abspath(
            os.path.expanduser(self._get_env("SANDBOX_ROOT", "./sandboxes"))
        )
        self.remote_timeout_seconds: float = self._get_float(
            "REMOTE_TIMEOUT_SECONDS", 30.0
        )

        self.formatter: str = self._get_env("FORMATTER", "prettier").lower()
        self.prettier_bin: str = self._get_env("PRETTIER_BIN", "prettier")
        self.router_type: str = self._get_env("ROUTER_TYPE", "app").lower()
        self.preload_script_src: str = self._get_env(
            "PRELOAD_SCRIPT_SRC", DEFAULT_PRELOAD_SCRIPT_SRC
        )

        self.max_tool_repairs: int = self._get_int("MAX_TOOL_REPAIRS", 1)
        self.max_steps: int = self._get_int("MAX_STEPS", 20)
        self.daily_message_limit: int = self._get_int("DAILY_MESSAGE_LIMIT", 50)
        self.monthly_message_limit: int = self._get_int("MONTHLY_MESSAGE_LIMIT", 500)
        self.api_tokens: dict[str, str] = self._parse_tokens(
            self._get_env("API_TOKENS", "")
        )

        if self.router_type not in ("app", "pages"):
            raise ConfigurationError(
                f"ROUTER_TYPE must be 'app' or 'pages', got {self.router_type!r}"
            )

    def _get_required_env(self, key: str) -> str:
        """Get a required environment variable, raise error if missing."""
        value = os.getenv(key)
        if not value:
            raise ConfigurationError(f"Required environment variable {key} is not set")
        return value

    def _get_env(self, key: str, default: str) -> str:
        """Get an environment variable with a default value."""
        return os.getenv(key, default)

    def _get_int(self, key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None or value.strip() == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"Environment variable {key} must be an integer")

    def _get_float(self, key: str, default: float) -> float:
        value = os.getenv(key)
        if value is None or value.strip() == "":
            return default
        try:
            return float(value)
        except ValueError:
            raise ConfigurationError(f"Environment variable {key} must be a number")

    def _parse_tokens(self, raw: str) -> dict[str, str]:
        """Parse 'token:user_id,token2:user_id2' into a token -> user mapping."""
        tokens: dict[str, str] = {}
        for item in raw.split(","):
            item = item.strip()
            if not item:
                continue
            token, sep, user_id = item.partition(":")
            if not sep or not token or not user_id:
                raise ConfigurationError(
                    "API_TOKENS entries must look like 'token:user_id'"
                )
            tokens[token] = user_id
        return tokens

    def require_openai_api_key(self) -> str:
        """Return the OpenAI API key, failing if it is not configured."""
        return self._get_required_env("OPENAI_API_KEY")


# Global settings instance
settings = Settings()
