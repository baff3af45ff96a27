from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import find_dotenv
from pydantic import BaseModel, ConfigDict, Field

from contextcli.config import ScanConfig
from contextcli.file_manipulation import normalize_extensions
from contextcli.ignore import IgnoreSet

if TYPE_CHECKING:
    import structlog

    from contextcli.configuration import ProjectConfiguration

ENV_FILE = find_dotenv(usecwd=True)


class Settings(BaseModel):
    """Command line settings for one contextcli invocation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    file: Path | None = Field(default=None, description="Single file to copy instead of scanning.")
    ignore: list[str] = Field(default_factory=list, description="Extra ignore globs.")
    no_ignore: bool = Field(default=False, description="Do not read .gitignore files.")
    depth: int | None = Field(default=None, ge=0, description="Maximum scan depth.")
    stdout: bool = Field(default=False, description="Print instead of copying to the clipboard.")
    max_size: int | None = Field(default=None, ge=0, description="Size limit in KB (overrides config).")
    no_content: bool = Field(default=False, description="Only output the tree.")
    log_file: str = Field(default="", description="Log file path.")


def build_scan_config(
    configuration: ProjectConfiguration,
    settings: Settings,
    root: Path,
    *,
    log: structlog.BoundLogger | None = None,
) -> ScanConfig:
    """Merge the persisted configuration and the command line into a scan snapshot.

    ``--max-size`` replaces the configured size limit, ``--no-ignore`` only
    turns off ``.gitignore`` consumption.

    Args:
        configuration (ProjectConfiguration): the persisted configuration
        settings (Settings): the command line settings
        root (Path): the scan root
        log (structlog.BoundLogger | None): diagnostics sink for pattern warnings

    Returns:
        ScanConfig: the immutable settings for the scan
    """
    max_size_kb = settings.max_size if settings.max_size is not None else configuration.max_file_size_kb
    ignore_set = IgnoreSet.build(
        configuration.ignore_patterns,
        settings.ignore,
        use_gitignore=configuration.use_gitignore and not settings.no_ignore,
        root=root,
        log=log,
    )
    return ScanConfig(
        extensions=normalize_extensions(configuration.extensions),
        max_depth=settings.depth,
        max_file_size_bytes=None if max_size_kb is None else max_size_kb * 1024,
        ignore_set=ignore_set,
    )
