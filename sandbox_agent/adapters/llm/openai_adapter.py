"""
OpenAI adapter implementation for structured generation.
"""

import json
import logging
from typing import Any, cast

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam
from typing_extensions import override

from sandbox_agent.config.settings import settings
from sandbox_agent.exceptions import LLMError
from sandbox_agent.ports.llm.llm_port import StructuredLLMPort

STRUCTURED_SYSTEM_MESSAGE = (
    "You produce JSON objects. Answer with a single JSON object that follows the "
    "given schema and nothing else."
)


class OpenAIAdapter(StructuredLLMPort):
    """OpenAI implementation of the structured generation port."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        api_base: str | None = None,
        client: AsyncOpenAI | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the OpenAI adapter.

        Args:
            api_key: OpenAI API key (defaults to settings)
            model: Model name (defaults to settings)
            api_base: API base URL (defaults to settings)
            client: Preconfigured client, mostly for tests
            logger: Logger instance to use for logging. If None, a default logger will be created.

        The client is created on first use, so adapters built without an API key
        only fail once a model is actually called.
        """
        self.model: str = model or settings.openai_model
        self.api_base: str | None = api_base or settings.openai_api_base
        self._api_key = api_key
        self._client: AsyncOpenAI | None = client
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    @property
    def client(self) -> AsyncOpenAI:
        """
        Raises:
            ConfigurationError: If no client was given and no API key is configured
        """
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key or settings.require_openai_api_key(),
                base_url=self.api_base,
            )
        return self._client

    def _prepare_messages(
        self, prompt: str, system_message: str
    ) -> list[ChatCompletionMessageParam]:
        """
        Prepare the messages for the OpenAI API.

        Args:
            prompt: The user's prompt
            system_message: The system message to set the context

        Returns:
            List of message dictionaries
        """
        return cast(
            list[ChatCompletionMessageParam],
            [
                {"role": "system", "content": system_message},
                {"role": "user", "content": prompt},
            ],
        )

    def _extract_response_content(self, response: Any) -> str:
        """
        Extract content from the OpenAI response.

        Raises:
            LLMError: If response is empty or invalid
        """
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise LLMError("No response generated from the model")
        message = getattr(choices[0], "message", None)
        if message is None:
            raise LLMError("Malformed response: missing message")
        content = message.content
        if content:
            return content.strip()
        raise LLMError("Empty response received from the model")

    @override
    async def generate_structured(
        self, schema: dict[str, Any], prompt: str
    ) -> dict[str, Any]:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=self._prepare_messages(prompt, STRUCTURED_SYSTEM_MESSAGE),
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "structured_output",
                        "schema": schema,
                        "strict": False,
                    },
                },
            )
            content = self._extract_response_content(response)
            value = json.loads(content)
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"Failed to generate structured output: {str(e)}")

        if not isinstance(value, dict):
            raise LLMError("Structured output is not a JSON object")
        self._logger.debug(f"Structured output generated with {self.model}")
        return value

    @override
    def get_model_info(self) -> dict[str, Any]:
        return {"provider": "OpenAI", "model": self.model, "api_base": self.api_base}
