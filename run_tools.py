"""
Run Tools — start tool servers as subprocesses and call their tools.

It:
1. Starts the selected tool servers (stdio subprocesses)
2. Lists their tools, or
3. Calls one tool with JSON arguments and prints the text reply, or
4. Shows the LangChain tools the bridge builds from them

Usage:
    # List tools of every server
    python run_tools.py --list

    # Call a tool
    python run_tools.py --servers tsx --call list_templates --args '{"search": "form"}'
    python run_tools.py --servers tsx --call generate_component \\
        --args '{"template": "component-minimal", "name": "UserCard"}'
    python run_tools.py --servers weather --call get_weather_forecast \\
        --args '{"location": "London, UK", "days": 3}'

    # Bridged LangChain tools
    python run_tools.py --langchain
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import signal
import logging

from tool_servers.errors import ToolServerError
from tool_servers.manager import ToolServerManager

logging.basicConfig(stream=sys.stderr, level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


# ============================================================
# TOOL SERVER DEFINITIONS
# ============================================================
# server_id → command and the environment variables it needs

SERVERS = {
    "tsx": {
        "command": [sys.executable, "-m", "tool_servers.servers.tsx_generator"],
        "requires_env": [],
    },
    "weather": {
        "command": [sys.executable, "-m", "tool_servers.servers.weather"],
        "requires_env": ["WEATHER_API_KEY"],
    },
}


def start_servers(manager: ToolServerManager, server_ids: list[str] | None = None) -> dict[str, list[dict]]:
    """Start tool servers and return discovered tools."""
    server_ids = server_ids or list(SERVERS.keys())
    all_tools = {}

    for sid in server_ids:
        config = SERVERS.get(sid)
        if not config:
            logger.warning(f"Unknown tool server: {sid}")
            continue

        missing = [name for name in config["requires_env"] if not os.environ.get(name)]
        if missing:
            logger.warning(f"  [{sid}] skipped — missing environment: {missing}")
            continue

        manager.register_server(sid, config["command"])

        try:
            tools = manager.start(sid)
            tool_names = [t["name"] for t in tools]
            logger.info(f"  [{sid}] started — tools: {tool_names}")
            all_tools[sid] = tools
        except (OSError, RuntimeError, ToolServerError) as e:
            logger.error(f"  [{sid}] failed to start: {e}")

    return all_tools


def find_server(discovered: dict[str, list[dict]], tool_name: str) -> str | None:
    for server_id, tools in discovered.items():
        if any(t["name"] == tool_name for t in tools):
            return server_id
    return None


def print_tools(discovered: dict[str, list[dict]]) -> None:
    for server_id, tools in discovered.items():
        print(f"  [{server_id}]")
        for tool in tools:
            params = tool.get("inputSchema", {}).get("properties", {})
            required = set(tool.get("inputSchema", {}).get("required", []))
            signature = ", ".join(
                f"{name}{'' if name in required else '?'}: {info.get('type', 'any')}"
                for name, info in params.items()
            )
            print(f"    {tool['name']:<24} ({signature})")
            print(f"    {'':<24} {tool.get('description', '')}")
        print()


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Start tool servers and call their tools.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tools.py --list
  python run_tools.py --servers tsx --call get_project_info
  python run_tools.py --servers weather --call get_current_weather --args '{"location": "Paris, FR"}'
        """,
    )
    parser.add_argument("--list", action="store_true", help="List tools of the started servers and exit")
    parser.add_argument("--call", type=str, help="Tool name to call")
    parser.add_argument("--args", type=str, default="{}", help="Tool arguments as a JSON object")
    parser.add_argument("--langchain", action="store_true", help="Show the LangChain tools built by the bridge")
    parser.add_argument("--servers", type=str, nargs="*", default=None,
                        choices=list(SERVERS), help="Which tool servers to start (default: all)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not (args.list or args.call or args.langchain):
        parser.error("one of --list, --call or --langchain is required")

    try:
        arguments = json.loads(args.args)
    except json.JSONDecodeError as e:
        parser.error(f"--args is not valid JSON: {e}")

    # ── Start tool servers ────────────────────────────────
    manager = ToolServerManager()

    # Graceful shutdown on Ctrl+C
    def shutdown(sig, frame):
        print("\nShutting down tool servers...", file=sys.stderr)
        manager.stop_all()
        sys.exit(0)
    signal.signal(signal.SIGINT, shutdown)

    try:
        discovered = start_servers(manager, args.servers)
        if not discovered:
            print("No tool servers started.", file=sys.stderr)
            return 1

        if args.list:
            print(f"\nAvailable tools ({sum(len(t) for t in discovered.values())}):\n")
            print_tools(discovered)
            return 0

        if args.langchain:
            from tool_servers.bridge import bridged_tools
            for tool in bridged_tools(manager):
                print(f"  {tool.name:<24} {tool.description}")
            return 0

        server_id = find_server(discovered, args.call)
        if not server_id:
            print(f"Error: no started server provides '{args.call}'.", file=sys.stderr)
            return 1

        try:
            result = manager.call(server_id, args.call, arguments)
        except ToolServerError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        print(result.joined_text)
        return 1 if result.is_error else 0
    finally:
        manager.stop_all()


if __name__ == "__main__":
    sys.exit(main())
