"""Command-line interface for gpt-trainer.

This module provides the main entry point and argument parsing for the
gpt-trainer CLI tool.
"""

import argparse
import json
import platform
import sys
from pathlib import Path
from typing import Any, Optional

from gpt_trainer._version import __version__
from gpt_trainer.display.colors import Colors, disable_colors, level_color
from gpt_trainer.errors import ExitCode, GptTrainerError, format_error_for_user, get_exit_code

# --list KIND -> client method
LIST_KINDS = {
    "data-sources": "get_all_data_sources",
    "chatbots": "get_all_chatbots",
    "agents": "get_all_agents",
    "tags": "get_all_tags",
}

# --get / --delete KIND -> (getter, deleter)
SINGLE_KINDS = {
    "data-source": ("get_data_source", "delete_data_source"),
    "chatbot": ("get_chatbot", "delete_chatbot"),
    "agent": ("get_agent", "delete_agent"),
    "tag": ("get_tag", "delete_tag"),
}


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="gpt-trainer",
        description="Manage GPT Trainer chatbots, agents, data sources and tags",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gpt-trainer --list chatbots              List chatbots
  gpt-trainer --list agents --chatbot ID   List agents of a chatbot
  gpt-trainer --get tag ID                 Show one tag
  gpt-trainer --delete data-source ID      Delete a data source
  gpt-trainer --analyze post.json --content-type document
  gpt-trainer --test-mode --list tags      Use built-in sample data
  gpt-trainer --config                     Show current configuration
  gpt-trainer --config set api_token TOKEN Store the API token
  gpt-trainer --show-logs 20               Show the 20 newest log entries
""",
    )

    parser.add_argument(
        "--list",
        "-l",
        choices=sorted(LIST_KINDS),
        metavar="KIND",
        help="List resources. KIND: data-sources, chatbots, agents, tags.",
    )
    parser.add_argument(
        "--chatbot",
        metavar="UUID",
        help="Chatbot that owns the agents (required for agent listing).",
    )
    parser.add_argument(
        "--get",
        nargs=2,
        metavar=("KIND", "UUID"),
        help="Show one resource. KIND: data-source, chatbot, agent, tag.",
    )
    parser.add_argument(
        "--delete",
        nargs=2,
        metavar=("KIND", "UUID"),
        help="Delete one resource. KIND: data-source, chatbot, agent, tag.",
    )
    parser.add_argument(
        "--analyze",
        metavar="FILE",
        help="Analyze content from FILE (JSON with title/content/excerpt, or plain text).",
    )
    parser.add_argument(
        "--content-type",
        default="document",
        metavar="TYPE",
        help="Content type selecting the analysis prompt (default: document).",
    )
    parser.add_argument(
        "--json", "-j", action="store_true", help="Output raw JSON instead of formatted view"
    )
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Serve built-in sample data instead of calling the API.",
    )
    parser.add_argument(
        "--config",
        "-c",
        nargs="*",
        metavar="COMMAND",
        help="Configuration commands: show (default), reset, set KEY VALUE",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write the event log to PATH (overrides the log_file setting).",
    )
    parser.add_argument(
        "--show-logs",
        nargs="?",
        const=20,
        type=int,
        metavar="N",
        help="Show the N newest event log entries (default: 20).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument(
        "--version",
        "-V",
        action="store_true",
        help="Show version and system information",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show error details and suggestions",
    )

    return parser


def print_version() -> None:
    """Print version and system information."""
    print(
        f"gpt-trainer {__version__} "
        f"(Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}, "
        f"{platform.system()} {platform.machine()})"
    )


def handle_config_command(
    config_args: list,
    show_config_func,
    reset_config_func,
    set_config_func,
    default_config: dict,
) -> None:
    """Handle configuration subcommands.

    Args:
        config_args: List of config command arguments.
        show_config_func: Function to display current configuration.
        reset_config_func: Function to reset configuration.
        set_config_func: Function to set a configuration value.
        default_config: Dictionary of default configuration values.
    """
    # Handle empty list (just --config with no args) as "show"
    if len(config_args) == 0:
        show_config_func()
    elif config_args[0] == "show":
        show_config_func()
    elif config_args[0] == "reset":
        reset_config_func()
    elif config_args[0] == "set":
        if len(config_args) != 3:
            print(f"{Colors.RED}Error: 'set' requires KEY and VALUE arguments{Colors.RESET}")
            print("Usage: gpt-trainer --config set KEY VALUE")
            print(f"\nValid keys: {', '.join(sorted(default_config.keys()))}")
            sys.exit(ExitCode.INVALID_ARGUMENT)
        set_config_func(config_args[1], config_args[2])
    else:
        print(f"{Colors.RED}Error: Unknown config command '{config_args[0]}'{Colors.RESET}")
        print("Available commands: show, reset, set KEY VALUE")
        sys.exit(ExitCode.INVALID_ARGUMENT)


def to_jsonable(value: Any) -> Any:
    """Convert models (and lists/dicts of them) to plain JSON data."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value


def print_resources(resources: list) -> None:
    if not resources:
        print(f"{Colors.DIM}No resources found.{Colors.RESET}")
        return
    for resource in resources:
        line = f"{Colors.CYAN}{resource.uuid}{Colors.RESET}  {resource.name}"
        visibility = getattr(getattr(resource, "meta", None), "visibility", None)
        if visibility:
            line += f" {Colors.DIM}({visibility}){Colors.RESET}"
        print(line)


def print_resource(resource: Any) -> None:
    for key, value in to_jsonable(resource).items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value)
        print(f"  {key + ':':<18}{value}")


def print_logs(entries: list, log_path: Path) -> None:
    if not entries:
        print(f"{Colors.DIM}No log entries found.{Colors.RESET}")
        return
    print()
    print(f"{Colors.BOLD}{Colors.CYAN}Event Log{Colors.RESET} ({len(entries)} entries)")
    print(f"{Colors.DIM}{'-' * 70}{Colors.RESET}")
    for entry in entries:
        timestamp = entry.get("timestamp", "")[:19]
        level = entry.get("level", "INFO")
        print(
            f"{Colors.DIM}{timestamp}{Colors.RESET} "
            f"{level_color(level)}{level:<8}{Colors.RESET} {entry.get('message', '')}"
        )
    print()
    print(f"{Colors.DIM}Log file: {log_path}{Colors.RESET}")


def read_analysis_input(path: Path) -> dict:
    """Load content to analyze from a JSON object or plain-text file."""
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None
    if isinstance(data, dict):
        return data
    return {"title": path.stem, "content": text}


def main(argv: Optional[list] = None) -> None:
    """Main entry point for gpt-trainer CLI.

    This function is the primary entry point when installed via pip/pipx/uv.
    It parses arguments and dispatches to the appropriate handler.
    """
    from gpt_trainer.analysis import ContentAnalyzer
    from gpt_trainer.api.client import TEST_TOKEN
    from gpt_trainer.config.security import mask_token, validate_api_token
    from gpt_trainer.config.settings import (
        CONFIG_FILE,
        DEFAULT_CONFIG,
        build_client,
        load_config,
        reset_config,
        sanitize_settings,
        save_config,
        validate_config,
    )
    from gpt_trainer.logger.event_log import EventLog

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        disable_colors()

    if args.version:
        print_version()
        return

    config = load_config()
    if args.log_file:
        config["log_file"] = args.log_file

    # Handle --show-logs flag
    if args.show_logs is not None:
        if not config.get("log_file"):
            print(f"{Colors.YELLOW}No log file configured.{Colors.RESET}")
            print("Use --log-file PATH or 'gpt-trainer --config set log_file PATH'.")
            sys.exit(0)
        log_path = Path(config["log_file"]).expanduser()
        entries = EventLog(log_path=log_path).get_logs(limit=args.show_logs)
        if args.json:
            print(json.dumps(entries, indent=2))
        else:
            print_logs(entries, log_path)
        return

    # Handle --config flag
    if args.config is not None:

        def _show_config():
            print()
            print(f"{Colors.BOLD}{Colors.CYAN}Current Configuration{Colors.RESET}")
            print()
            token = config.get("api_token")
            if token:
                print(f"  API Token:        {Colors.GREEN}Configured{Colors.RESET} ({mask_token(token)})")
            else:
                print(f"  API Token:        {Colors.YELLOW}Not configured{Colors.RESET}")
            print(f"  API URL:          {config.get('api_base_url')}")
            print(f"  Cache TTL:        {config.get('cache_ttl')}s")
            print(f"  Timeout:          {config.get('timeout')}s")
            print(f"  Debug:            {'Yes' if config.get('debug') else 'No'}")
            print(f"  Log File:         {config.get('log_file') or '-'}")
            if config.get("enable_error_notifications") and config.get("notification_webhook"):
                print(f"  Notifications:    {Colors.GREEN}Active{Colors.RESET}")
            else:
                print(f"  Notifications:    {Colors.DIM}Inactive{Colors.RESET}")
            print(f"  Content Prompts:  {', '.join(sorted(config.get('content_prompts') or {}))}")
            print()
            print(f"  Config File:      {CONFIG_FILE}")
            print()

        def _reset_config():
            reset_config()
            print(f"{Colors.GREEN}Configuration reset to defaults.{Colors.RESET}")

        def _set_config(key: str, value: str):
            if key not in DEFAULT_CONFIG:
                print(f"{Colors.RED}Error: Unknown config key '{key}'{Colors.RESET}")
                print(f"Valid keys: {', '.join(sorted(DEFAULT_CONFIG.keys()))}")
                sys.exit(ExitCode.INVALID_ARGUMENT)

            # Type conversion based on the default value's type
            expected_type = type(DEFAULT_CONFIG[key])
            converted: Any
            if expected_type == bool:
                converted = value.lower() in ("true", "1", "yes", "on")
            elif expected_type in (int, float):
                try:
                    converted = expected_type(value)
                except ValueError:
                    print(f"{Colors.RED}Error: '{key}' must be a number{Colors.RESET}")
                    sys.exit(ExitCode.INVALID_ARGUMENT)
            elif expected_type in (list, dict):
                try:
                    converted = json.loads(value)
                except json.JSONDecodeError:
                    print(f"{Colors.RED}Error: '{key}' must be JSON{Colors.RESET}")
                    sys.exit(ExitCode.INVALID_ARGUMENT)
            else:
                converted = value if value.lower() != "null" else None

            if key == "api_token" and converted is not None:
                is_valid, error = validate_api_token(converted.strip())
                if not is_valid:
                    print(f"{Colors.RED}Error: {error}{Colors.RESET}")
                    sys.exit(ExitCode.VALIDATION_ERROR)

            updated = {**config, **sanitize_settings({key: converted})}
            errors = validate_config({key: updated[key]})
            if errors:
                print(f"{Colors.RED}Error: {errors[0]}{Colors.RESET}")
                sys.exit(ExitCode.VALIDATION_ERROR)

            save_config(updated)
            shown = mask_token(updated[key]) if key in ("api_token", "notification_secret") else updated[key]
            print(f"{Colors.GREEN}Set {key} = {shown}{Colors.RESET}")

        handle_config_command(args.config, _show_config, _reset_config, _set_config, DEFAULT_CONFIG)
        return

    if not (args.list or args.get or args.delete or args.analyze):
        parser.print_help()
        return

    if args.test_mode:
        config["api_token"] = TEST_TOKEN

    try:
        client = build_client(config)

        if args.list:
            method = getattr(client, LIST_KINDS[args.list])
            if args.list == "agents":
                if not args.chatbot:
                    parser.error("--list agents requires --chatbot UUID")
                result = method(args.chatbot)
            else:
                result = method()
            if args.json:
                print(json.dumps(to_jsonable(result), indent=2))
            else:
                print_resources(result)
            return

        if args.get or args.delete:
            kind, uuid = args.get or args.delete
            if kind not in SINGLE_KINDS:
                parser.error(f"unknown KIND '{kind}' (choose from {', '.join(sorted(SINGLE_KINDS))})")
            getter, deleter = SINGLE_KINDS[kind]
            if args.get:
                result = getattr(client, getter)(uuid)
                if result is None:
                    print(f"{Colors.YELLOW}{kind} {uuid} not found{Colors.RESET}")
                    sys.exit(ExitCode.API_NOT_FOUND)
            else:
                kwargs = {"chatbot_uuid": args.chatbot} if kind == "agent" else {}
                result = getattr(client, deleter)(uuid, **kwargs)
            if args.json:
                print(json.dumps(to_jsonable(result), indent=2))
            elif args.get:
                print_resource(result)
            else:
                print(f"{Colors.GREEN}{result.message or 'Deleted'}{Colors.RESET}")
            return

        if args.analyze:
            content = read_analysis_input(Path(args.analyze))
            analyzer = ContentAnalyzer(client, prompts=config.get("content_prompts"))
            if analyzer.prompt_for(args.content_type) is None:
                print(f"{Colors.RED}Error: no prompt configured for '{args.content_type}'{Colors.RESET}")
                sys.exit(ExitCode.INVALID_ARGUMENT)
            analysis = analyzer.analyze(args.content_type, content)
            if analysis is None:
                print(f"{Colors.RED}Error: analysis failed (see event log){Colors.RESET}")
                sys.exit(ExitCode.API_ERROR)
            if args.json:
                print(json.dumps(analysis.to_dict(), indent=2))
            else:
                print(f"{Colors.BOLD}Summary:{Colors.RESET} {analysis.summary or '-'}")
                for point in analysis.key_points:
                    print(f"  - {point}")
                if analysis.suggestions:
                    print(f"{Colors.BOLD}Suggestions:{Colors.RESET}")
                    for suggestion in analysis.suggestions:
                        print(f"  - {suggestion}")
            return
    except (GptTrainerError, OSError) as e:
        error_msg = format_error_for_user(e, verbose=args.verbose)
        print(f"{Colors.RED}{error_msg}{Colors.RESET}", file=sys.stderr)
        if isinstance(e, GptTrainerError) and e.get_suggestion():
            print(f"{Colors.YELLOW}Suggestion: {e.get_suggestion()}{Colors.RESET}", file=sys.stderr)
        sys.exit(get_exit_code(e))


__all__ = [
    "LIST_KINDS",
    "SINGLE_KINDS",
    "create_parser",
    "main",
    "print_version",
    "handle_config_command",
    "read_analysis_input",
    "to_jsonable",
]
