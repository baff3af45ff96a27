"""Depth-first directory scanner producing a tree listing and the included files.

Within a directory, files are listed before subdirectories and each group is
sorted by code point order of the entry names. Whether an entry is the last
one of its directory is decided on that combined listing, before any filter
runs. The included files therefore come out in pre-order: a directory's files,
then the contents of each subdirectory in turn.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from contextcli.config import FileRecord, ScanConfig, ScanResult
from contextcli.exceptions import DirectoryAccessError
from contextcli.file_manipulation import is_allowed_file, is_likely_binary, normalize_extensions, relpath
from contextcli.ignore import IgnoreSet
from contextcli.logging import logger

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    import structlog

BRANCH = "├──"
LAST_BRANCH = "└──"


def tree_prefix(parents_last: Sequence[bool]) -> str:
    """Build the indentation for an entry from its ancestors' last-ness.

    Args:
        parents_last (Sequence[bool]): one flag per ancestor directory below the
            scan root, True when that ancestor was the last entry of its parent

    Returns:
        str: the prefix, four characters per ancestor
    """
    return "".join("    " if last else "│   " for last in parents_last)


def _list_entries(directory: Path) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as it:
        entries = list(it)
    files = sorted((e for e in entries if not e.is_dir()), key=lambda e: e.name)
    dirs = sorted((e for e in entries if e.is_dir()), key=lambda e: e.name)
    return files + dirs


def _is_link(entry: os.DirEntry[str]) -> bool:
    return entry.is_symlink() or entry.is_junction()


class _Scanner:
    def __init__(
        self,
        root: Path,
        config: ScanConfig,
        result: ScanResult,
        log: structlog.BoundLogger,
    ) -> None:
        self.root = root
        self.config = config
        self.result = result
        self.log = log

    def walk(self, directory: Path, remaining_depth: int | None, parents_last: tuple[bool, ...]) -> None:
        if remaining_depth is not None and remaining_depth <= 0:
            return

        try:
            entries = _list_entries(directory)
        except OSError as e:
            if not parents_last:
                raise DirectoryAccessError(path=directory, reason=str(e)) from e
            self.log.warning("Cannot access directory %s: %s", directory, e)
            self.result.tree_lines.append(
                f"{tree_prefix(parents_last)}{LAST_BRANCH} [!] Cannot access: {directory.name}/ ({type(e).__name__})",
            )
            return

        prefix = tree_prefix(parents_last)
        for idx, entry in enumerate(entries):
            is_last = idx == len(entries) - 1
            if _is_link(entry):
                continue

            path = Path(entry.path)
            rel = relpath(path, self.root)
            is_dir = entry.is_dir()
            if self.config.is_ignored(rel, is_dir=is_dir):
                continue

            connector = LAST_BRANCH if is_last else BRANCH
            if is_dir:
                self.result.tree_lines.append(f"{prefix}{connector} {entry.name}/")
                next_depth = None if remaining_depth is None else remaining_depth - 1
                self.walk(path, next_depth, (*parents_last, is_last))
                continue

            record = self._filter_file(entry, path, rel)
            if record is None:
                continue
            self.result.included_files.append(record)
            self.result.tree_lines.append(f"{prefix}{connector} {entry.name}")

    def _filter_file(self, entry: os.DirEntry[str], path: Path, rel: str) -> FileRecord | None:
        if not entry.is_file():
            return None
        if not is_allowed_file(entry.name, self.config.extensions):
            return None
        try:
            st = entry.stat()
        except OSError as e:
            self.log.warning("Skipping %s: %s", rel, e)
            return None
        max_size = self.config.max_file_size_bytes
        if max_size is not None and st.st_size > max_size:
            return None
        if is_likely_binary(path, size=st.st_size):
            return None
        return FileRecord(path=path, rel=rel, size=st.st_size, mtime=st.st_mtime)


def scan_directory(
    root: Path,
    config: ScanConfig,
    *,
    result: ScanResult | None = None,
    log: structlog.BoundLogger | None = None,
) -> ScanResult:
    """Walk `root` depth-first and collect the tree lines and included files.

    Symbolic links are never listed or followed. Ignored entries, and files
    rejected by the extension, size or binary checks, produce no output at all.
    A subdirectory that cannot be listed gets a single ``[!] Cannot access``
    line and the walk continues with its siblings.

    Args:
        root (Path): the scan root
        config (ScanConfig): the effective scan settings
        result (ScanResult | None): an existing result to append to
        log (structlog.BoundLogger | None): diagnostics sink, defaults to the package logger

    Raises:
        DirectoryAccessError: if `root` itself cannot be listed

    Returns:
        ScanResult: the tree lines and the included files, in traversal order
    """
    root = root.absolute()
    result = result if result is not None else ScanResult()
    log = log or logger.bind(root=str(root))
    _Scanner(root, config, result, log).walk(root, config.max_depth, ())
    return result


def scan(
    root: Path,
    *,
    max_depth: int | None = None,
    ignore_set: IgnoreSet | None = None,
    allowed_extensions: Collection[str] = (),
    max_file_size_bytes: int | None = None,
    log: structlog.BoundLogger | None = None,
) -> ScanResult:
    """Scan `root` with explicit settings; see :func:`scan_directory`."""
    config = ScanConfig(
        extensions=normalize_extensions(allowed_extensions),
        max_depth=max_depth,
        max_file_size_bytes=max_file_size_bytes,
        ignore_set=ignore_set or IgnoreSet(),
    )
    return scan_directory(root, config, log=log)
