#!/usr/bin/env python3
"""
Command line entry point for ctx.
Path: ctx_switcher/bootstrap/runner.py

usage: ctx [flags] [set [id] | exec <id> -- <command...> | prompt | list | dump | edit | help]
"""

import argparse
import os
import sys
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from ctx_switcher.config import default_config_path, load_config
from ctx_switcher.context.lookup import ACTIVE_PATH_ENV
from ctx_switcher.dispatcher import PICKER_COMMAND, Dispatcher, handle_dump, handle_edit
from ctx_switcher.exceptions import CtxError, UserError
from ctx_switcher.utils.logging import get_logger, initialize_logging_config

logger = get_logger()

COMMANDS = ("set", "exec", "prompt", "list", "dump", "edit", "help")
# Must not fail visibly: they run from shell prompts and from the picker.
QUIET_COMMANDS = ("prompt", "list")


class LogMode(str, Enum):
    DEBUG = "debug"
    NORMAL = "normal"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UserError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="ctx",
        add_help=False,
        allow_abbrev=False,
        description="Switch between shell contexts defined in ~/.ctx.hcl"
    )
    parser.add_argument("-config", "--config", dest="config", default=None,
                        help="Path to config file (default: $CTX_CONFIG or ~/.ctx.hcl)")
    parser.add_argument("-help", "--help", dest="help", action="store_true",
                        help="Show this help and exit")
    parser.add_argument("--log", type=LogMode, choices=list(LogMode), default=LogMode.NORMAL,
                        help="Logging level (default: normal)")
    parser.add_argument("command", nargs="?", default="set", help=argparse.SUPPRESS)
    parser.add_argument("arguments", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    return parser


def format_usage(parser: argparse.ArgumentParser) -> str:
    lines = [
        "usage: ctx [set <argument> | exec <argument> -- <command...> | prompt | list | dump | edit | help]",
        "",
        f"  if {PICKER_COMMAND[0]} is installed, no argument is needed to set context",
        "",
        "flags:",
    ]
    for action in parser._actions:
        if action.help == argparse.SUPPRESS:
            continue
        lines.append(f"  {', '.join(action.option_strings)}")
        lines.append(f"        {action.help}")
    return "\n".join(lines)


def split_exec_arguments(arguments: Sequence[str]) -> Tuple[str, List[str]]:
    """
    Split `exec` arguments into (context id, command).

    `dev -- ls -la` and `dev ls -la` both give ("dev", ["ls", "-la"]).
    """
    arguments = list(arguments)
    if "--" in arguments:
        index = arguments.index("--")
        head, command = arguments[:index], arguments[index + 1:]
    else:
        head, command = arguments[:1], arguments[1:]
    if len(head) != 1:
        raise UserError("exec requires exactly one context before --")
    return head[0], command


def exit_status(returncode: int) -> int:
    """Map a child's return code to a process exit status; death by signal N is 128 + N."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def _run_quiet(command: str, config_path: Path, environ: Mapping[str, str]) -> int:
    """prompt and list: print what can be printed, always succeed."""
    if command == "prompt" and not environ.get(ACTIVE_PATH_ENV):
        return 0
    try:
        dispatcher = Dispatcher(load_config(config_path), environ)
        if command == "prompt":
            print(dispatcher.handle_prompt(), end="")
        else:
            for name in dispatcher.handle_list():
                print(name)
    except Exception as e:
        logger.debug("runner.quiet_command_failed", command=command, error=str(e))
    return 0


def run(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Execute a parsed command line.

    Returns:
        Process exit code: the child's code for set/exec/edit, 0 or 1 otherwise
    """
    if environ is None:
        environ = os.environ

    command = args.command
    arguments = list(args.arguments or [])
    config_path = Path(args.config).expanduser() if args.config else default_config_path(environ)

    if command not in COMMANDS:
        print(f"Error: unknown command: {command}", file=sys.stderr)
        return 1

    if command == "help":
        print(format_usage(build_parser()))
        return 0

    if command in QUIET_COMMANDS:
        return _run_quiet(command, config_path, environ)

    try:
        if command == "dump":
            print(handle_dump(config_path), end="")
            return 0
        if command == "edit":
            return handle_edit(config_path, environ)

        dispatcher = Dispatcher(load_config(config_path), environ)
        if command == "set":
            if len(arguments) > 1:
                raise UserError("set only accept 1 argument")
            return dispatcher.handle_set(arguments[0] if arguments else None)

        context_id, exec_command = split_exec_arguments(arguments)
        return dispatcher.handle_exec(context_id, exec_command)
    except CtxError as e:
        logger.error("runner.command_failed", command=command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UserError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(format_usage(parser), file=sys.stderr)
        sys.exit(1)

    initialize_logging_config("DEBUG" if args.log == LogMode.DEBUG else None, force=True)
    logger.debug("cli.parsed", command=args.command, arguments=args.arguments, config=args.config)

    if args.help or args.command == "help":
        print(format_usage(parser))
        sys.exit(0)

    sys.exit(exit_status(run(args)))


if __name__ == "__main__":
    main()
