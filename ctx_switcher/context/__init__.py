"""
Context tree: the data model and active-path lookup.
"""

from .models import ConfigRoot, Context, EnvDefinition, ResolutionKind
from .lookup import (
    ACTIVE_PATH_ENV,
    candidates_for,
    extend_active_path,
    find_child,
    lookup,
    split_active_path,
)

__all__ = [
    'ConfigRoot', 'Context', 'EnvDefinition', 'ResolutionKind',
    'ACTIVE_PATH_ENV', 'candidates_for', 'extend_active_path', 'find_child',
    'lookup', 'split_active_path',
]
