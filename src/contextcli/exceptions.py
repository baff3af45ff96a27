from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ContextCliError(Exception):
    """Base exception for errors in the contextcli package."""


@dataclass(frozen=True)
class PatternError(ContextCliError):
    """Raised when an ignore pattern cannot be compiled into a glob matcher."""

    pattern: str
    reason: str


@dataclass(frozen=True)
class DirectoryAccessError(ContextCliError):
    """Raised when the scan root cannot be listed."""

    path: Path
    reason: str


@dataclass(frozen=True)
class FileReadError(ContextCliError):
    """Raised when a file cannot be read."""

    path: Path
    reason: str


@dataclass(frozen=True)
class ConfigurationError(ContextCliError):
    """Raised when a configuration file cannot be read, parsed or written."""

    path: Path
    message: str


@dataclass(frozen=True)
class ConfigFileNotFoundError(ContextCliError):
    """Raised when a command needs a configuration file and none exists."""

    start: Path
    message: str = "No configuration file found to modify."


@dataclass(frozen=True)
class EditorNotFoundError(ContextCliError):
    """Raised when no editor can be found to open a file."""

    message: str = "Could not find an editor (set EDITOR/VISUAL or install nano/vim/code)."
