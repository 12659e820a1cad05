"""
Error taxonomy for the context switcher.
Path: ctx_switcher/exceptions.py
"""

from enum import Enum
from typing import Optional


class CtxError(Exception):
    """Base class for every error reported to the user."""
    pass


class ConfigError(CtxError):
    """Configuration file is missing, unreadable, unparsable or invalid."""
    pass


class ResolutionErrorKind(str, Enum):
    IO_ERROR = "io_error"
    PARSE_ERROR = "parse_error"
    EXEC_ERROR = "exec_error"
    UNKNOWN_TYPE = "unknown_type"


class ResolutionError(CtxError):
    """An environment variable could not be resolved."""

    def __init__(self, message: str, kind: ResolutionErrorKind, name: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.name = name


class ContextLookupError(CtxError):
    pass


class ContextNotFoundError(ContextLookupError):
    pass


class ActivePathMismatchError(ContextNotFoundError):
    """CTX_ACTIVE names a context that the loaded configuration does not have."""

    def __init__(self, active_path: str, segment: str):
        super().__init__(
            f"active context path '{active_path}' does not match configuration "
            f"(no context '{segment}'); was the config changed while a context was active?"
        )
        self.active_path = active_path
        self.segment = segment


class LaunchError(CtxError):
    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class ExecNotFoundError(LaunchError):
    pass


class UserError(CtxError):
    """Bad command line: unknown command, missing argument and so on."""
    pass


class NoShellError(UserError):
    pass


class NoCommandError(UserError):
    pass
