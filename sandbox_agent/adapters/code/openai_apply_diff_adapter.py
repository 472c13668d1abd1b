"""
Fast-apply adapter: merges an edit snippet into a file with an OpenAI-compatible model.
"""

import logging
import re
from typing import Optional

from openai import AsyncOpenAI
from typing_extensions import override

from sandbox_agent.config.settings import settings
from sandbox_agent.exceptions import ConfigurationError
from sandbox_agent.ports.code.apply_diff_port import ApplyDiffPort, DiffResult

_CODE_FENCE = re.compile(r"^```[\w-]*\n(?P<body>.*)\n```\s*$", re.DOTALL)


class OpenAIApplyDiffAdapter(ApplyDiffPort):
    """Apply-diff service backed by a fast-apply chat model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        api_base: str | None = None,
        client: AsyncOpenAI | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the adapter.

        Args:
            api_key: API key of the fast-apply endpoint (defaults to settings)
            model: Fast-apply model name (defaults to settings)
            api_base: Base URL of the endpoint (defaults to settings)
            client: Preconfigured client, mostly for tests
            logger: Logger instance to use for logging
        """
        self.model: str = model or settings.apply_diff_model
        self._api_key = api_key
        self._api_base = api_base
        self._client: AsyncOpenAI | None = client
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    @property
    def client(self) -> AsyncOpenAI:
        """
        Client of the fast-apply endpoint, created on first use.

        Raises:
            ConfigurationError: If no client was given and no API key is configured
        """
        if self._client is None:
            key = self._api_key or settings.apply_diff_api_key
            if not key:
                raise ConfigurationError(
                    "APPLY_DIFF_API_KEY (or OPENAI_API_KEY) is required for the edit tool"
                )
            self._client = AsyncOpenAI(
                api_key=key, base_url=self._api_base or settings.apply_diff_api_base
            )
        return self._client

    def _prompt(self, original_code: str, update_snippet: str, instruction: str) -> str:
        return (
            f"<instruction>{instruction}</instruction>\n"
            f"<code>{original_code}</code>\n"
            f"<update>{update_snippet}</update>"
        )

    def _strip_fence(self, text: str) -> str:
        match = _CODE_FENCE.match(text.strip())
        return match.group("body") if match else text

    @override
    async def apply_diff(
        self, original_code: str, update_snippet: str, instruction: str
    ) -> DiffResult:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": self._prompt(original_code, update_snippet, instruction),
                    }
                ],
            )
        except Exception as e:
            self._logger.error(f"Error applying code change: {e}")
            return DiffResult(result=None, error=str(e))

        choices = getattr(response, "choices", None) or []
        content: Optional[str] = choices[0].message.content if choices else None
        if not content:
            return DiffResult(result=None, error="Empty response from apply model")
        return DiffResult(result=self._strip_fence(content), error=None)
