"""Persisted ``.contextcli.json`` configuration: lookup, loading and saving."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from contextcli.config import (
    CONFIG_FILE_NAMES,
    CURRENT_SCHEMA_VERSION,
    DEFAULT_EXTENSIONS,
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_MAX_FILE_SIZE_KB,
)
from contextcli.exceptions import ConfigurationError
from contextcli.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    import structlog

_YAML_SUFFIXES = {".yaml", ".yml"}


class ProjectConfiguration(BaseModel):
    """Settings stored in a ``.contextcli.json`` (or ``.yaml``) file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION, alias="schemaVersion")
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="Allowed extensions and bare file names.",
    )
    ignore_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS),
        alias="ignorePatterns",
        description="Glob patterns excluded from the scan.",
    )
    use_gitignore: bool = Field(default=True, alias="useGitignore", description="Consume .gitignore files.")
    max_file_size_kb: int | None = Field(
        default=DEFAULT_MAX_FILE_SIZE_KB,
        ge=0,
        alias="maxFileSizeKb",
        description="Files above this size in KB are skipped; null means no limit.",
    )

    @field_validator("extensions", "ignore_patterns", mode="before")
    @classmethod
    def _null_list_as_empty(cls, value: Any) -> Any:  # noqa: ANN401
        return [] if value is None else value

    @property
    def max_file_size_bytes(self) -> int | None:
        """Size limit in bytes, or None when unlimited."""
        return None if self.max_file_size_kb is None else self.max_file_size_kb * 1024


def find_config_file(start: Path | None = None) -> Path | None:
    """Search for a configuration file from `start` upward.

    The search stops after the first directory holding a ``.git`` directory,
    or at the filesystem root.

    Args:
        start (Path | None): the directory to start from, defaults to the current directory

    Returns:
        Path | None: the configuration file found, or None
    """
    current = (start or Path.cwd()).resolve()
    while True:
        for name in CONFIG_FILE_NAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate
        if (current / ".git").is_dir() or current.parent == current:
            return None
        current = current.parent


def _parse(path: Path, text: str) -> ProjectConfiguration:
    if path.suffix.lower() in _YAML_SUFFIXES:
        data = yaml.safe_load(text)
        if data is None:
            raise ConfigurationError(path=path, message="Configuration file is empty.")
        return ProjectConfiguration.model_validate(data)
    return ProjectConfiguration.model_validate_json(text)


def load_configuration(
    path: Path | None,
    *,
    log: structlog.BoundLogger | None = None,
) -> ProjectConfiguration:
    """Load a configuration file.

    Args:
        path (Path | None): the file to load; defaults are returned when None or missing
        log (structlog.BoundLogger | None): diagnostics sink, defaults to the package logger

    Raises:
        ConfigurationError: if the file cannot be read or is malformed

    Returns:
        ProjectConfiguration: the loaded configuration
    """
    log = log or logger
    if path is None or not path.is_file():
        return ProjectConfiguration()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(path=path, message=f"Failed to read configuration file: {e}") from e
    try:
        config = _parse(path, text)
    except (ValidationError, yaml.YAMLError) as e:
        raise ConfigurationError(path=path, message=f"Failed to parse configuration file: {e}") from e
    if config.schema_version > CURRENT_SCHEMA_VERSION:
        log.warning(
            "Configuration file %s has schema version %d, newer than supported version %d. "
            "Some settings might be ignored.",
            path,
            config.schema_version,
            CURRENT_SCHEMA_VERSION,
        )
    return config


def get_effective_configuration(
    start: Path | None = None,
    *,
    log: structlog.BoundLogger | None = None,
) -> ProjectConfiguration:
    """Find and load the configuration, falling back to defaults on any error."""
    log = log or logger
    path = find_config_file(start)
    try:
        return load_configuration(path, log=log)
    except ConfigurationError as e:
        log.warning("%s Using default configuration. (%s)", e.message, e.path)
        return ProjectConfiguration()


def dump_configuration(config: ProjectConfiguration, *, yaml_format: bool = False) -> str:
    """Serialize a configuration with its file keys (camelCase)."""
    if yaml_format:
        return yaml.safe_dump(config.model_dump(by_alias=True), sort_keys=False)
    return config.model_dump_json(by_alias=True, indent=2) + "\n"


def save_configuration(config: ProjectConfiguration, path: Path) -> None:
    """Write a configuration file, overwriting any existing one.

    Args:
        config (ProjectConfiguration): the configuration to write
        path (Path): destination; a ``.yaml``/``.yml`` suffix selects YAML

    Raises:
        ConfigurationError: if the file cannot be written
    """
    text = dump_configuration(config, yaml_format=path.suffix.lower() in _YAML_SUFFIXES)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(path=path, message=f"Failed to save configuration file: {e}") from e


def normalize_extension(ext: str) -> str:
    """Normalize an extension given on the command line.

    Values starting with ``.`` and values without any ``.`` (bare file names
    such as ``Dockerfile``) are kept; anything else gets a leading ``.``.
    The result is lower-cased.
    """
    ext = ext.strip()
    if not ext.startswith(".") and "." in ext:
        ext = f".{ext}"
    return ext.lower()


def add_extensions(config: ProjectConfiguration, extensions: Iterable[str]) -> tuple[ProjectConfiguration, int]:
    """Return a copy of `config` with the missing extensions appended, and how many were added."""
    current = list(config.extensions)
    known = {e.lower() for e in current}
    added = 0
    for ext in extensions:
        normalized = normalize_extension(ext)
        if normalized and normalized not in known:
            current.append(normalized)
            known.add(normalized)
            added += 1
    return config.model_copy(update={"extensions": current}), added


def remove_extensions(config: ProjectConfiguration, extensions: Iterable[str]) -> tuple[ProjectConfiguration, int]:
    """Return a copy of `config` without the given extensions (case-insensitive), and how many were removed."""
    targets = {normalize_extension(ext) for ext in extensions}
    kept = [e for e in config.extensions if e.lower() not in targets]
    removed = len(config.extensions) - len(kept)
    return config.model_copy(update={"extensions": kept}), removed
