"""
Active path handling and context lookup.

The active path is the comma-joined chain of context names from the root to
the current context, carried between processes in CTX_ACTIVE.
"""

from typing import List, Optional, Sequence

from ctx_switcher.context.models import ConfigRoot, Context
from ctx_switcher.exceptions import ActivePathMismatchError
from ctx_switcher.utils.logging import get_logger

logger = get_logger()

ACTIVE_PATH_ENV = "CTX_ACTIVE"
PATH_SEPARATOR = ","


def split_active_path(active_path: Optional[str]) -> List[str]:
    """Split an active path into context names; empty or unset gives []."""
    if not active_path:
        return []
    return active_path.split(PATH_SEPARATOR)


def extend_active_path(active_path: Optional[str], name: str) -> str:
    """Descend one level: "a,b" + "c" -> "a,b,c"; "" + "a" -> "a"."""
    if active_path:
        return f"{active_path}{PATH_SEPARATOR}{name}"
    return name


def find_child(candidates: Sequence[Context], name: str) -> Optional[Context]:
    """First context in `candidates` whose name matches exactly."""
    for candidate in candidates:
        if candidate.name == name:
            return candidate
    return None


def lookup(root: ConfigRoot, active_path: Optional[str]) -> Optional[Context]:
    """
    Resolve an active path against the configuration tree.

    Args:
        root: Loaded configuration
        active_path: Comma-joined context names, may be empty

    Returns:
        The deepest matched context, or None when no path is active

    Raises:
        ActivePathMismatchError: If any segment does not exist at its depth
    """
    segments = split_active_path(active_path)
    if not segments:
        return None

    candidates: Sequence[Context] = root.contexts
    current = None
    for segment in segments:
        current = find_child(candidates, segment)
        if current is None:
            logger.debug("context.lookup.segment_missing",
                         active_path=active_path,
                         segment=segment)
            raise ActivePathMismatchError(active_path, segment)
        candidates = current.contexts

    logger.debug("context.lookup.resolved", active_path=active_path, context=current.name)
    return current


def candidates_for(root: ConfigRoot, active: Optional[Context]) -> Sequence[Context]:
    """Contexts selectable from the current position."""
    if active is None:
        return root.contexts
    return active.contexts
