"""
Use case preparing source files for the visual editor before they are written.
"""

import logging
from typing import Optional

from sandbox_agent.entities.transform_result import TransformResult
from sandbox_agent.exceptions import FormatFailure, ParseFailure
from sandbox_agent.ports.code.formatter_port import FormatterPort
from sandbox_agent.utils import jsx_ast


class ContentTransformer:
    """Inject the preload script and element identifiers, then format."""

    def __init__(
        self,
        formatter: FormatterPort,
        preload_script_src: str,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the transformer.

        Args:
            formatter: Formatter applied after identifiers are injected
            preload_script_src: URL of the preload script added to the entry file
            logger: Logger instance to use for logging
        """
        self._formatter = formatter
        self._preload_script_src = preload_script_src
        self._logger = logger or logging.getLogger(__name__)

    async def transform(
        self, file_path: str, content: str, is_entry_file: bool = False
    ) -> TransformResult:
        """
        Transform the content of a source file.

        Args:
            file_path: Normalized path of the file
            content: Raw content about to be written
            is_entry_file: Whether the file is the root layout of the app

        Returns:
            TransformResult; ``modified`` tells whether identifiers were added

        Raises:
            ParseFailure: If the content is not valid source; callers should
                write it unchanged
        """
        source = content.encode("utf-8")
        if is_entry_file:
            source, injected = jsx_ast.inject_preload_script(
                file_path, source, self._preload_script_src
            )
            if injected:
                self._logger.info(f"Injected preload script into {file_path}")

        source, modified = jsx_ast.add_oids(file_path, source)
        unformatted = source.decode("utf-8")
        new_content = await self._format(file_path, unformatted)
        return TransformResult(modified=modified, new_content=new_content)

    async def _format(self, file_path: str, unformatted: str) -> str:
        """
        Format, then keep the result only if it still parses and carries the
        same identifiers as the unformatted source.
        """
        try:
            formatted = await self._formatter.format(file_path, unformatted)
        except FormatFailure as e:
            self._logger.warning(f"Error formatting {file_path}: {e}")
            return unformatted

        if formatted == unformatted:
            return unformatted

        try:
            formatted_oids = jsx_ast.collect_oids(file_path, formatted.encode("utf-8"))
        except ParseFailure as e:
            self._logger.warning(f"Formatted content of {file_path} does not parse: {e}")
            return unformatted

        if formatted_oids != jsx_ast.collect_oids(file_path, unformatted.encode("utf-8")):
            self._logger.warning(
                f"Formatter changed element identifiers in {file_path}; keeping unformatted content"
            )
            return unformatted
        return formatted
