"""
Formatter adapters: Prettier through a subprocess, or no formatting at all.
"""

import asyncio
import logging
import shutil
from typing import Optional

from typing_extensions import override

from sandbox_agent.exceptions import FormatFailure
from sandbox_agent.ports.code.formatter_port import FormatterPort


class PassthroughFormatterAdapter(FormatterPort):
    """Formatter that returns content unchanged."""

    @override
    async def format(self, path: str, content: str) -> str:
        return content


class PrettierFormatterAdapter(FormatterPort):
    """Run the ``prettier`` CLI on content piped through stdin."""

    def __init__(
        self,
        prettier_bin: str = "prettier",
        timeout: float = 20.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._prettier_bin = prettier_bin
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)

    def is_available(self) -> bool:
        return shutil.which(self._prettier_bin) is not None

    @override
    async def format(self, path: str, content: str) -> str:
        # --stdin-filepath only selects the parser; nothing is read from disk
        cmd = [self._prettier_bin, "--stdin-filepath", path.lstrip("/") or "file.tsx"]
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise FormatFailure(f"Cannot run {self._prettier_bin}: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(content.encode("utf-8")), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise FormatFailure(f"Prettier timed out after {self._timeout}s on {path}")

        if proc.returncode != 0:
            err = stderr.decode("utf-8", errors="replace").strip()
            raise FormatFailure(f"Prettier failed on {path}: {err}")
        self._logger.debug(f"Formatted {path} with prettier")
        return stdout.decode("utf-8")
