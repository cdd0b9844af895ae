"""Command-line entrypoint for the Trello semantic layer.

Builds the process ResolverContext from the environment and runs a single
tool, printing its JSON result:

    python main.py get_board_snapshot --args '{"board_name": "Marketing"}'
    python main.py --list
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from trello_semantic.config.settings import load_settings
from trello_semantic.core.context import ResolverContext
from trello_semantic.core.tools import get_tool_schemas, run_tool
from trello_semantic.utils.logger import get_logger


logger = get_logger("trello_semantic.main")


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a semantic Trello tool.")
    parser.add_argument("tool", nargs="?", help="Tool name, e.g. get_board_snapshot")
    parser.add_argument("--args", default="{}", help="Tool arguments as a JSON object")
    parser.add_argument("--list", action="store_true", help="Print the registered tool schemas")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    options = _parse_args(argv)

    if options.list:
        print(json.dumps(get_tool_schemas(), indent=2))
        return 0

    if not options.tool:
        print("A tool name is required (or use --list).", file=sys.stderr)
        return 2

    try:
        tool_args: Dict[str, Any] = json.loads(options.args)
    except json.JSONDecodeError as exc:
        print(f"--args is not valid JSON: {exc}", file=sys.stderr)
        return 2
    if not isinstance(tool_args, dict):
        print("--args must be a JSON object.", file=sys.stderr)
        return 2

    settings = load_settings()
    if not settings.has_credentials:
        logger.warning("TRELLO_API_KEY / TRELLO_API_TOKEN are not set; Trello will reject requests")

    context = ResolverContext.from_settings(settings)
    result = asyncio.run(run_tool(options.tool, tool_args, context))
    print(json.dumps(result, indent=2, default=str))
    return 0 if not (isinstance(result, dict) and result.get("success") is False) else 1


if __name__ == "__main__":
    sys.exit(main())
