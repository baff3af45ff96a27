from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from contextcli.config import TEXT_EXTENSIONS, file_extension
from contextcli.exceptions import FileReadError

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator

SNIFF_BYTES = 4096


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def normalize_extensions(extensions: Collection[str]) -> frozenset[str]:
    """Lower-case an extension allow-list, dropping blank entries."""
    return frozenset(e.strip().lower() for e in extensions if e and e.strip())


def is_allowed_file(name: str, allowed_extensions: Collection[str]) -> bool:
    """Check a file name against the extension allow-list.

    Both the extension and the full file name are looked up, so bare names
    such as ``Dockerfile`` or ``requirements.txt`` can be allowed. The
    comparison is case-insensitive; `allowed_extensions` must be lower-cased.

    Args:
        name (str): the file name
        allowed_extensions (Collection[str]): lower-cased extensions and file names

    Returns:
        bool: True if the file is allowed
    """
    return file_extension(name).lower() in allowed_extensions or name.lower() in allowed_extensions


def is_likely_binary(path: Path, size: int | None = None) -> bool:
    """Heuristically tell whether a file is binary.

    - Empty files are never binary.
    - Files with a known text extension are never binary (no read).
    - Otherwise, a NUL byte in the first 4 KiB means binary.
    - A file that cannot be read counts as binary.

    Args:
        path (Path): the file to check
        size (int | None): the file size when already known

    Returns:
        bool: True if the file is probably binary
    """
    try:
        if size is None:
            size = path.stat().st_size
        if size == 0:
            return False
        if file_extension(path.name).lower() in TEXT_EXTENSIONS:
            return False
        with path.open("rb") as f:
            chunk = f.read(SNIFF_BYTES)
    except OSError:
        return True
    return b"\x00" in chunk


def iter_text_lines(path: Path) -> Iterator[str]:
    """Yield the lines of a text file, without line terminators.

    The file is read lazily so very large files are never loaded at once.
    Undecodable bytes are replaced and a UTF-8 BOM is dropped.

    Args:
        path (Path): the file to read

    Raises:
        FileReadError: if the file cannot be opened or read

    Yields:
        Iterator[str]: the lines of the file
    """
    try:
        with path.open(encoding="utf-8-sig", errors="replace") as f:
            for line in f:
                yield line.removesuffix("\n")
    except OSError as e:
        raise FileReadError(path=path, reason=e.strerror or str(e)) from e
