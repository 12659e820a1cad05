"""
Resolution of environment variable values.
Path: ctx_switcher/execution/resolver.py

A definition's kind selects one resolver function: the source is either the
value itself, a file to read, or a command whose output is the value.
"""

import os
from typing import Callable, Dict, Mapping, Optional

from ctx_switcher.context.models import EnvDefinition, ResolutionKind
from ctx_switcher.exceptions import LaunchError, ResolutionError, ResolutionErrorKind
from ctx_switcher.execution.launcher import capture_output, environ_entries
from ctx_switcher.utils.logging import get_logger
from ctx_switcher.utils.shellwords import parse_with_envs

logger = get_logger()


def _resolve_static(definition: EnvDefinition, environ: Mapping[str, str]) -> str:
    return definition.source


def _resolve_file(definition: EnvDefinition, environ: Mapping[str, str]) -> str:
    try:
        with open(definition.source, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
            return f.read()
    except OSError as e:
        logger.error("resolver.file_unreadable",
                     name=definition.name,
                     path=definition.source,
                     error=str(e))
        raise ResolutionError(
            f"{definition.name}: cannot read {definition.source}: {e.strerror or e}",
            ResolutionErrorKind.IO_ERROR,
            definition.name
        ) from e


def _resolve_command(definition: EnvDefinition, environ: Mapping[str, str]) -> str:
    try:
        assignments, argv = parse_with_envs(definition.source)
    except ValueError as e:
        raise ResolutionError(
            f"{definition.name}: cannot parse command {definition.source!r}: {e}",
            ResolutionErrorKind.PARSE_ERROR,
            definition.name
        ) from e

    if not argv:
        raise ResolutionError(
            f"{definition.name}: command {definition.source!r} is empty",
            ResolutionErrorKind.PARSE_ERROR,
            definition.name
        )

    try:
        return capture_output(argv, environ_entries(environ) + assignments)
    except LaunchError as e:
        raise ResolutionError(
            f"{definition.name}: {e}",
            ResolutionErrorKind.EXEC_ERROR,
            definition.name
        ) from e


_RESOLVERS: Dict[ResolutionKind, Callable[[EnvDefinition, Mapping[str, str]], str]] = {
    ResolutionKind.STATIC: _resolve_static,
    ResolutionKind.FILE: _resolve_file,
    ResolutionKind.COMMAND: _resolve_command,
}


def resolve(definition: EnvDefinition, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Compute the value of one environment definition.

    Args:
        definition: Variable to resolve
        environ: Ambient environment for command sources (defaults to os.environ)

    Returns:
        The resolved value

    Raises:
        ResolutionError: With kind IO_ERROR, PARSE_ERROR, EXEC_ERROR or UNKNOWN_TYPE
    """
    if environ is None:
        environ = os.environ

    try:
        kind = ResolutionKind(definition.kind)
    except ValueError:
        logger.error("resolver.unknown_type", name=definition.name, kind=definition.kind)
        raise ResolutionError(
            f"unknown environment resolution type: {definition.kind}",
            ResolutionErrorKind.UNKNOWN_TYPE,
            definition.name
        )

    logger.debug("resolver.resolving", name=definition.name, kind=kind.value)
    return _RESOLVERS[kind](definition, environ)
