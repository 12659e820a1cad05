"""
Data model for contexts and their environment definitions.

Everything here is built once from the configuration file and never mutated
afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class ResolutionKind(str, Enum):
    """How an environment variable's value is computed."""
    STATIC = "static"
    FILE = "file"
    COMMAND = "command"


@dataclass(frozen=True)
class EnvDefinition:
    """
    One `env "<name>"` block.

    `kind` keeps the configured string as-is; an unrecognised kind is only
    rejected when the variable is resolved.
    """
    name: str
    source: str
    kind: str = ResolutionKind.STATIC.value


@dataclass(frozen=True)
class Context:
    name: str
    prompt: Optional[str] = None
    environments: Tuple[EnvDefinition, ...] = ()
    contexts: Tuple["Context", ...] = ()


@dataclass(frozen=True)
class ConfigRoot:
    """Top of the configuration tree; acts as the implicit parent of all contexts."""
    shell: Optional[str] = None
    contexts: Tuple[Context, ...] = ()
    path: Optional[Path] = field(default=None, compare=False)
