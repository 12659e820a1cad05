"""
Command dispatch for ctx.
Path: ctx_switcher/dispatcher.py

Each invocation starts either at the root (no CTX_ACTIVE) or inside the
context named by CTX_ACTIVE. Commands pick among the children of that
position; entering one means spawning a child process whose CTX_ACTIVE is
one level deeper. The dispatcher never changes its own environment.
"""

import os
import shlex
import sys
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from ctx_switcher.config import read_config_text
from ctx_switcher.context.lookup import ACTIVE_PATH_ENV, candidates_for, find_child, lookup
from ctx_switcher.context.models import ConfigRoot, Context
from ctx_switcher.exceptions import (
    ConfigError,
    ContextNotFoundError,
    CtxError,
    LaunchError,
    NoCommandError,
    NoShellError,
    UserError,
)
from ctx_switcher.execution.environment import assemble
from ctx_switcher.execution.launcher import capture_output, environ_entries, launch
from ctx_switcher.utils.logging import get_logger
from ctx_switcher.utils.shellwords import parse_with_envs

logger = get_logger()

PICKER_COMMAND = ("fzf", "--ansi", "--no-preview")
PICKER_SOURCE_ENV = "FZF_DEFAULT_COMMAND"
SHELL_ENV = "SHELL"
EDITOR_ENV = "EDITOR"


class Dispatcher:
    """
    Runs ctx commands relative to the active context.

    Args:
        config: Loaded configuration tree
        environ: Process environment (defaults to os.environ)
        program: How to re-invoke ctx for the picker's candidate list
    """

    def __init__(self,
                 config: ConfigRoot,
                 environ: Optional[Mapping[str, str]] = None,
                 program: Optional[str] = None):
        self.config = config
        self.environ = os.environ if environ is None else environ
        self.program = program or sys.argv[0]
        self.logger = logger.bind(active_path=self.active_path)

    @property
    def active_path(self) -> str:
        return self.environ.get(ACTIVE_PATH_ENV, "")

    def active_context(self) -> Optional[Context]:
        """Context named by CTX_ACTIVE, or None at the root."""
        return lookup(self.config, self.active_path)

    def candidates(self) -> Sequence[Context]:
        return candidates_for(self.config, self.active_context())

    def find(self, context_id: str) -> Context:
        context = find_child(self.candidates(), context_id)
        if context is None:
            self.logger.error("dispatcher.context_not_found", context_id=context_id)
            raise ContextNotFoundError(f"context {context_id} not found")
        return context

    def picker_source(self) -> str:
        """Command line the picker runs to list candidates (ctx's own `list`)."""
        parts = [self.program]
        if self.config.path is not None:
            parts.extend(["--config", str(self.config.path)])
        parts.append("list")
        return " ".join(shlex.quote(p) for p in parts)

    def pick(self) -> str:
        """Ask the interactive picker for a context id."""
        env = environ_entries(self.environ)
        env.append(f"{PICKER_SOURCE_ENV}={self.picker_source()}")
        self.logger.debug("dispatcher.picker_started", picker=PICKER_COMMAND[0])
        try:
            selected = capture_output(list(PICKER_COMMAND), env)
        except LaunchError as e:
            raise UserError(f"no context given and picker failed: {e}") from e
        if not selected:
            raise UserError("no context selected")
        return selected

    def shell_command(self) -> Tuple[List[str], List[str]]:
        """
        Split the shell directive into (assignments, argv).

        The configured `shell` wins over $SHELL.
        """
        shell = self.config.shell or self.environ.get(SHELL_ENV, "")
        if not shell:
            raise NoShellError("can not detect current shell")
        try:
            assignments, argv = parse_with_envs(shell)
        except ValueError as e:
            raise ConfigError(f"cannot parse shell {shell!r}: {e}") from e
        if not argv:
            raise NoShellError(f"shell {shell!r} has no command")
        return assignments, argv

    def handle_set(self, context_id: Optional[str] = None) -> int:
        """Enter a child context in a new interactive shell; returns its exit code."""
        if not context_id:
            context_id = self.pick()

        context = self.find(context_id)
        assignments, argv = self.shell_command()
        env = assemble(context, assignments, self.environ, self.active_path)
        self.logger.info("dispatcher.set", context=context.name, shell=argv[0])
        return launch(argv, env)

    def handle_exec(self, context_id: str, command: Sequence[str]) -> int:
        """Run one command inside a child context; returns its exit code."""
        if not command:
            raise NoCommandError("exec requires a command after --")
        if not context_id:
            raise UserError("exec requires a context")

        context = self.find(context_id)
        env = assemble(context, (), self.environ, self.active_path)
        self.logger.info("dispatcher.exec", context=context.name, command=list(command))
        return launch(list(command), env)

    def handle_prompt(self) -> str:
        """Prompt string of the active context; "" at the root or on any failure."""
        if not self.active_path:
            return ""
        try:
            context = self.active_context()
        except CtxError as e:
            self.logger.debug("dispatcher.prompt_suppressed", error=str(e))
            return ""
        if context is None or context.prompt is None:
            return ""
        return context.prompt

    def handle_list(self) -> List[str]:
        """Names of the selectable contexts in declaration order."""
        try:
            return [c.name for c in self.candidates()]
        except CtxError as e:
            self.logger.debug("dispatcher.list_suppressed", error=str(e))
            return []


def handle_dump(config_path: Union[str, Path]) -> str:
    return read_config_text(config_path)


def handle_edit(config_path: Union[str, Path], environ: Optional[Mapping[str, str]] = None) -> int:
    """Open the configuration file in $EDITOR; the file need not exist yet."""
    if environ is None:
        environ = os.environ
    editor = environ.get(EDITOR_ENV, "")
    if not editor:
        raise UserError("EDITOR is not set")
    try:
        _, argv = parse_with_envs(editor)
    except ValueError as e:
        raise UserError(f"cannot parse EDITOR {editor!r}: {e}") from e
    if not argv:
        raise UserError("EDITOR is not set")
    logger.info("dispatcher.edit", editor=argv[0], path=str(config_path))
    return launch(argv + [str(config_path)], environ_entries(environ))
