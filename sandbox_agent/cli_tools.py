import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from sandbox_agent.container import container
from sandbox_agent.entities.execution_target import target_from_sandbox_id
from sandbox_agent.entities.tool_invocation import ToolInvocation, ToolName
from sandbox_agent.exceptions import BaseAppError


async def _run(sandbox_id: str, tool: str, arguments: str) -> dict[str, Any]:
    dispatcher = container.get_tools_dispatcher()
    repairer = container.get_tool_repairer()
    tool_set = dispatcher.bind(target_from_sandbox_id(sandbox_id))
    outcome = await repairer.execute(tool_set, ToolInvocation(name=tool, arguments=arguments))
    return {
        "result": outcome.result,
        "repaired": outcome.repaired is not None,
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sandbox-tools",
        description="Run one sandbox tool against a sandbox directory and print the result.",
    )
    parser.add_argument("--sandbox", required=True, help="Sandbox id (directory under SANDBOX_ROOT)")
    parser.add_argument(
        "--tool",
        required=True,
        choices=[name.value for name in ToolName],
        help="Tool to run",
    )
    parser.add_argument(
        "--args",
        default="{}",
        help='Tool arguments as a JSON object, e.g. \'{"path": "app"}\'',
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty print the JSON result with colors",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at debug level")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        output = asyncio.run(_run(args.sandbox, args.tool, args.args))
    except BaseAppError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return 1

    text = json.dumps(output, ensure_ascii=False, indent=2)
    if args.pretty:
        from rich.console import Console
        from rich.panel import Panel
        from rich.syntax import Syntax

        Console(soft_wrap=True).print(
            Panel(Syntax(text, "json"), title=args.tool, border_style="magenta")
        )
    else:
        print(text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
