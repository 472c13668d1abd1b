"""
Use case running a tool call and regenerating its arguments when they do not validate.
"""

import json
import logging
from typing import Optional

from sandbox_agent.entities.tool_invocation import (
    RepairedCall,
    ToolCallOutcome,
    ToolInvocation,
)
from sandbox_agent.exceptions import SchemaViolationError
from sandbox_agent.ports.llm.llm_port import StructuredLLMPort
from sandbox_agent.ports.llm.tools_port import ToolsHandlerPort


class ToolCallRepairer:
    """Execute tool calls, asking a structured model to fix invalid arguments."""

    def __init__(
        self,
        llm: StructuredLLMPort,
        max_repairs: int = 1,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the use case.

        Args:
            llm: Model used to regenerate arguments under the tool's schema
            max_repairs: Repairs allowed per invocation before the error propagates
            logger: Logger instance to use for logging
        """
        self._llm = llm
        self._max_repairs = max(0, max_repairs)
        self._logger = logger or logging.getLogger(__name__)

    def _repair_prompt(self, invocation: ToolInvocation, schema: dict[str, object]) -> str:
        return "\n".join(
            [
                f'The model tried to call the tool "{invocation.name}" with the following arguments:',
                json.dumps(invocation.arguments_for_display()),
                "The tool accepts the following schema:",
                json.dumps(schema),
                "Please fix the arguments.",
            ]
        )

    async def repair(
        self, tools: ToolsHandlerPort, invocation: ToolInvocation
    ) -> RepairedCall:
        """
        Regenerate the arguments of an invocation under its tool's schema.

        Raises:
            LLMError: If the structured generation fails
        """
        schema = tools.parameters_schema(invocation.name)
        self._logger.warning(
            f"Invalid parameter for tool {invocation.name} with args "
            f"{json.dumps(invocation.arguments_for_display())}, attempting to fix"
        )
        corrected = await self._llm.generate_structured(
            schema, self._repair_prompt(invocation, schema)
        )
        return RepairedCall(original=invocation, corrected_arguments=json.dumps(corrected))

    async def execute(
        self, tools: ToolsHandlerPort, invocation: ToolInvocation
    ) -> ToolCallOutcome:
        """
        Dispatch an invocation, repairing schema violations.

        Unknown tools are never repaired. Tool failures other than schema
        violations propagate unchanged.

        Returns:
            The outcome, carrying the repairs that were applied

        Raises:
            NoSuchToolError: If the tool is not part of the set
            SchemaViolationError: If the arguments are still invalid after the allowed repairs
            ToolError: If the tool itself fails
        """
        repairs: list[RepairedCall] = []
        current = invocation
        while True:
            try:
                result = await tools.dispatch(current.name, current.arguments)
            except SchemaViolationError:
                if len(repairs) >= self._max_repairs:
                    raise
                repaired = await self.repair(tools, current)
                repairs.append(repaired)
                current = repaired.to_invocation()
                continue
            return ToolCallOutcome(
                invocation=current, result=result, repairs=tuple(repairs)
            )
