"""Translate gitignore-style ignore patterns into compiled glob matchers."""

from __future__ import annotations

import glob
import re
from dataclasses import dataclass

from contextcli.exceptions import PatternError


@dataclass(frozen=True)
class GlobMatcher:
    """A compiled glob pattern.

    ``**`` matches across ``/`` separators, ``*`` and ``?`` do not. Matching is
    case-sensitive and anchored on the whole path.
    """

    source: str
    glob: str
    regex: re.Pattern[str]

    def matches(self, path: str) -> bool:
        """Check a root-relative POSIX path (directories end with ``/``)."""
        return self.regex.match(path) is not None


def to_glob(pattern: str) -> str:
    """Normalize a gitignore-style pattern into a flat glob.

    - Backslashes become ``/`` and surrounding whitespace is dropped.
    - One leading ``/`` (gitignore root anchor) is removed.
    - A pattern without any ``/`` is prefixed with ``**/`` so it matches at any depth.

    Args:
        pattern (str): the raw pattern, e.g. "*.log", "/build", "docs/*.md"

    Returns:
        str: the glob to compile, e.g. "**/*.log", "**/build", "docs/*.md"
    """
    glob_pattern = pattern.strip().replace("\\", "/")
    glob_pattern = glob_pattern.removeprefix("/")
    if "/" not in glob_pattern and not glob_pattern.startswith("**/"):
        glob_pattern = f"**/{glob_pattern}"
    return glob_pattern


def _check_character_classes(pattern: str, glob_pattern: str) -> None:
    for segment in glob_pattern.split("/"):
        i, n = 0, len(segment)
        while i < n:
            if segment[i] != "[":
                i += 1
                continue
            j = i + 1
            if j < n and segment[j] == "!":
                j += 1
            if j < n and segment[j] == "]":
                j += 1
            close = segment.find("]", j)
            if close == -1:
                raise PatternError(pattern=pattern, reason=f"unterminated character class in {segment!r}")
            i = close + 1


def compile_pattern(pattern: str) -> GlobMatcher:
    """Compile a raw ignore pattern into a matcher.

    Args:
        pattern (str): the raw pattern (gitignore-style or plain glob)

    Raises:
        PatternError: if the pattern is empty or its glob syntax cannot be parsed

    Returns:
        GlobMatcher: the compiled matcher
    """
    if not pattern.strip().replace("\\", "/").removeprefix("/"):
        raise PatternError(pattern=pattern, reason="empty pattern")
    glob_pattern = to_glob(pattern)
    _check_character_classes(pattern, glob_pattern)
    try:
        regex = re.compile(glob.translate(glob_pattern, recursive=True, include_hidden=True, seps="/"))
    except re.error as e:
        raise PatternError(pattern=pattern, reason=str(e)) from e
    return GlobMatcher(source=pattern, glob=glob_pattern, regex=regex)
