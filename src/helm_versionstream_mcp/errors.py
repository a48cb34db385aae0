"""Error types shared by the resolution and override pipelines."""

import copy
from enum import Enum


class ErrorKind(Enum):
    """Broad classification of a pipeline failure."""

    CONFIG = "config"
    IO = "io"
    RENDER = "render"
    PARSE = "parse"


class VersionStreamError(Exception):
    """Base exception carrying an error kind and a human readable message.

    Errors are wrapped with context (a file path or dependency name) as they
    propagate, keeping the kind and chaining the original via ``__cause__``.
    """

    kind: ErrorKind = ErrorKind.IO

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def wrap(self, context: str) -> "VersionStreamError":
        """Return a copy of this error, same type and kind, prefixed with ``context``."""
        wrapped = copy.copy(self)
        wrapped.message = f"{context}: {self.message}"
        wrapped.args = (wrapped.message,)
        wrapped.__cause__ = self
        return wrapped

    def __str__(self) -> str:
        return self.message


class ConfigReason(Enum):
    """Why a dependency could not be resolved."""

    MISSING_REPOSITORY = "missing_repository"
    NO_PREFIX = "no_prefix_for_repository"
    NO_VERSION_FOUND = "no_version_found"


class ConfigError(VersionStreamError):
    """Caller-fixable data problem in a requirements or config file."""

    kind = ErrorKind.CONFIG

    def __init__(self, message: str, *, reason: ConfigReason | None = None) -> None:
        super().__init__(message)
        self.reason = reason


class FileStoreError(VersionStreamError):
    """Existence check, read, write or git failure."""

    kind = ErrorKind.IO


class RenderError(VersionStreamError):
    """Template parse or execution failure."""

    kind = ErrorKind.RENDER


class ParseError(VersionStreamError):
    """Malformed structured document."""

    kind = ErrorKind.PARSE


def wrap_error(error: Exception, context: str) -> VersionStreamError:
    """Wrap any exception with context, classifying foreign errors as IO."""
    if isinstance(error, VersionStreamError):
        return error.wrap(context)
    wrapped = FileStoreError(f"{context}: {error}")
    wrapped.__cause__ = error
    return wrapped
