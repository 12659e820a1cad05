"""
Assembly of the environment handed to a context's child process.
Path: ctx_switcher/execution/environment.py
"""

import os
from typing import List, Mapping, Optional, Sequence

from ctx_switcher.context.lookup import ACTIVE_PATH_ENV, extend_active_path
from ctx_switcher.context.models import Context
from ctx_switcher.execution.launcher import environ_entries
from ctx_switcher.execution.resolver import resolve
from ctx_switcher.utils.logging import get_logger

logger = get_logger()


def assemble(
    target: Context,
    extra_vars: Sequence[str] = (),
    environ: Optional[Mapping[str, str]] = None,
    active_path: Optional[str] = None
) -> List[str]:
    """
    Build the ordered NAME=value list for a child of `target`.

    Entries are appended in override order: inherited environment, the
    context's own variables in declaration order, `extra_vars`, and finally
    the extended CTX_ACTIVE marker. The first resolution failure propagates
    and nothing is returned.

    Args:
        target: Context being entered
        extra_vars: Additional NAME=value entries (e.g. from the shell directive)
        environ: Inherited environment (defaults to os.environ)
        active_path: Current active path (defaults to environ's CTX_ACTIVE)

    Raises:
        ResolutionError: If any variable cannot be resolved
    """
    if environ is None:
        environ = os.environ
    if active_path is None:
        active_path = environ.get(ACTIVE_PATH_ENV, "")

    resolved = []
    for definition in target.environments:
        value = resolve(definition, environ)
        resolved.append(f"{definition.name}={value}")

    entries = environ_entries(environ)
    entries.extend(resolved)
    entries.extend(extra_vars)
    entries.append(f"{ACTIVE_PATH_ENV}={extend_active_path(active_path, target.name)}")

    logger.debug("environment.assembled",
                 context=target.name,
                 variables=[d.name for d in target.environments],
                 extra=len(extra_vars))
    return entries
