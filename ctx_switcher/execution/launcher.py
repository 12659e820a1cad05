"""
Child process spawning for the context switcher.
Path: ctx_switcher/execution/launcher.py

The child's stdin, stdout and stderr are the terminal's own, so interactive
shells, editors and pickers work unchanged. The environment handed in is
used as-is: callers must already include whatever they want inherited.
"""

import subprocess
from typing import Dict, List, Mapping, Sequence

from ctx_switcher.exceptions import ExecNotFoundError, LaunchError
from ctx_switcher.utils.logging import get_logger

logger = get_logger()


def env_list_to_dict(env: Sequence[str]) -> Dict[str, str]:
    """
    Fold NAME=value entries into a mapping, later entries winning.

    Entries without "=" are skipped.
    """
    result: Dict[str, str] = {}
    for entry in env:
        name, sep, value = entry.partition("=")
        if not sep or not name:
            continue
        result[name] = value
    return result


def environ_entries(environ: Mapping[str, str]) -> List[str]:
    """NAME=value entries in the mapping's own order."""
    return [f"{name}={value}" for name, value in environ.items()]


def _check_argv(argv: Sequence[str]) -> List[str]:
    if not argv or not argv[0]:
        raise LaunchError("no executable given")
    return list(argv)


def launch(argv: Sequence[str], env: Sequence[str]) -> int:
    """
    Run argv with the given environment and wait for it to exit.

    Args:
        argv: Executable followed by its arguments
        env: Ordered NAME=value entries

    Returns:
        The child's exit code

    Raises:
        ExecNotFoundError: If the executable cannot be found
        LaunchError: If the process cannot be started
    """
    cmd = _check_argv(argv)
    logger.info("launcher.spawning", command=cmd)
    try:
        result = subprocess.run(cmd, env=env_list_to_dict(env), check=False)
    except FileNotFoundError as e:
        logger.error("launcher.exec_not_found", command=cmd, error=str(e))
        raise ExecNotFoundError(f"executable not found: {cmd[0]}") from e
    except OSError as e:
        logger.error("launcher.start_failed", command=cmd, error=str(e))
        raise LaunchError(f"failed to start {cmd[0]}: {e}") from e

    logger.info("launcher.exited", command=cmd[0], returncode=result.returncode)
    return result.returncode


def capture_output(argv: Sequence[str], env: Sequence[str]) -> str:
    """
    Run argv and return its stripped standard output.

    stdin and stderr stay attached to the terminal so prompting commands
    (password managers, fzf) can interact with the user.

    Raises:
        ExecNotFoundError: If the executable cannot be found
        LaunchError: If the process cannot be started or exits non-zero
    """
    cmd = _check_argv(argv)
    logger.debug("launcher.capturing", command=cmd)
    try:
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            env=env_list_to_dict(env),
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            check=False
        )
    except FileNotFoundError as e:
        logger.error("launcher.exec_not_found", command=cmd, error=str(e))
        raise ExecNotFoundError(f"executable not found: {cmd[0]}") from e
    except OSError as e:
        logger.error("launcher.start_failed", command=cmd, error=str(e))
        raise LaunchError(f"failed to start {cmd[0]}: {e}") from e

    if result.returncode != 0:
        logger.error("launcher.command_failed", command=cmd, returncode=result.returncode)
        raise LaunchError(
            f"command {cmd[0]} failed with exit code {result.returncode}",
            returncode=result.returncode
        )

    return (result.stdout or "").strip()
