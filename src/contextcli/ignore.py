"""Merge ignore patterns from configuration, CLI flags and ``.gitignore`` files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from contextcli.exceptions import PatternError
from contextcli.logging import logger
from contextcli.patterns import GlobMatcher, compile_pattern

if TYPE_CHECKING:
    from collections.abc import Sequence

    import structlog

GITIGNORE_FILE_NAME = ".gitignore"


def find_gitignore_files(start: Path) -> list[Path]:
    """Collect ``.gitignore`` files from `start` upward.

    The walk stops after the first directory holding a ``.git`` directory, or
    at the filesystem root. That stopping directory is included.

    Args:
        start (Path): the directory to start from (usually the scan root)

    Returns:
        list[Path]: the ``.gitignore`` files found, nearest first
    """
    found: list[Path] = []
    current = start.resolve()
    while True:
        candidate = current / GITIGNORE_FILE_NAME
        if candidate.is_file():
            found.append(candidate)
        if (current / ".git").is_dir() or current.parent == current:
            break
        current = current.parent
    return found


def read_gitignore_patterns(path: Path) -> list[str]:
    """Read the patterns of one ``.gitignore`` file.

    Lines are trimmed; blank lines and ``#`` comments are skipped. Negations
    (``!pattern``) are kept verbatim and end up as literal globs.
    """
    lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    return [s for s in (ln.strip() for ln in lines) if s and not s.startswith("#")]


@dataclass(frozen=True)
class IgnoreSet:
    """Union of compiled ignore matchers; no precedence and no negation."""

    matchers: tuple[GlobMatcher, ...] = field(default_factory=tuple)

    @classmethod
    def from_patterns(
        cls,
        patterns: Sequence[str],
        *,
        log: structlog.BoundLogger | None = None,
    ) -> IgnoreSet:
        """Compile patterns, skipping (and logging) those that fail to parse."""
        log = log or logger
        if not patterns:
            return cls()
        matchers: list[GlobMatcher] = []
        for pattern in patterns:
            try:
                matchers.append(compile_pattern(pattern))
            except PatternError as e:
                log.warning("Failed to parse ignore pattern %r: %s", e.pattern, e.reason)
        return cls(matchers=tuple(matchers))

    @classmethod
    def build(
        cls,
        config_patterns: Sequence[str] | None,
        cli_patterns: Sequence[str] | None,
        *,
        use_gitignore: bool,
        root: Path,
        log: structlog.BoundLogger | None = None,
    ) -> IgnoreSet:
        """Build the merged ignore set for a scan.

        Patterns are unioned in this order: configured patterns, CLI
        ``--ignore`` values, then (when `use_gitignore`) the lines of every
        ``.gitignore`` between `root` and the repository or filesystem root.

        Args:
            config_patterns (Sequence[str] | None): patterns from the configuration file
            cli_patterns (Sequence[str] | None): patterns passed on the command line
            use_gitignore (bool): whether ``.gitignore`` files are consumed
            root (Path): directory the ``.gitignore`` lookup starts from
            log (structlog.BoundLogger | None): diagnostics sink, defaults to the package logger

        Returns:
            IgnoreSet: the merged set; empty when no usable pattern remains
        """
        log = log or logger
        patterns: list[str] = [*(config_patterns or []), *(cli_patterns or [])]
        if use_gitignore:
            for gitignore in find_gitignore_files(root):
                log.info("Loading ignore patterns from %s", gitignore)
                try:
                    patterns.extend(read_gitignore_patterns(gitignore))
                except OSError as e:
                    log.warning("Could not read %s: %s", gitignore, e)
        return cls.from_patterns(patterns, log=log)

    def __bool__(self) -> bool:
        return bool(self.matchers)

    def should_ignore(self, rel: str, *, is_dir: bool) -> bool:
        """Check a root-relative path against every matcher.

        Args:
            rel (str): the path relative to the scan root, POSIX separators
            is_dir (bool): whether the path is a directory (tested with a trailing ``/``)

        Returns:
            bool: True if any matcher matches
        """
        if not self.matchers:
            return False
        target = f"{rel}/" if is_dir else rel
        return any(m.matches(target) for m in self.matchers)
