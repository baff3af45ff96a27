"""Locate and launch an external editor for the configuration file."""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess  # noqa: S404
import sys
from typing import TYPE_CHECKING

from dotenv import dotenv_values

from contextcli.exceptions import EditorNotFoundError
from contextcli.settings import ENV_FILE

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from pathlib import Path

    EditorLauncher = Callable[[Sequence[str]], int]

EDITOR_VARIABLES = ("EDITOR", "VISUAL")
COMMON_EDITORS = ("nano", "vim", "vi", "code", "gedit", "open")


def editor_environment() -> dict[str, str]:
    """Return the environment used to find an editor.

    Values from a ``.env`` file are visible, but the process environment wins.
    """
    values = {k: v for k, v in dotenv_values(ENV_FILE).items() if v is not None} if ENV_FILE else {}
    return {**values, **os.environ}


def find_editor(
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> list[str] | None:
    """Find the command used to edit a file.

    Lookup order: ``EDITOR``, ``VISUAL``, ``notepad`` on Windows, then the
    first of nano/vim/vi/code/gedit/open found on ``PATH``.

    Args:
        environ (Mapping[str, str] | None): environment to read, defaults to :func:`editor_environment`
        platform (str | None): platform name, defaults to ``sys.platform``

    Returns:
        list[str] | None: the editor command and its arguments, or None if none was found
    """
    environ = editor_environment() if environ is None else environ
    platform = platform or sys.platform
    for var in EDITOR_VARIABLES:
        value = environ.get(var, "").strip()
        if value:
            return shlex.split(value, posix=platform != "win32")
    if platform == "win32":
        return ["notepad.exe"]
    search_path = environ.get("PATH")
    for candidate in COMMON_EDITORS:
        found = shutil.which(candidate, path=search_path)
        if found:
            return [found]
    return None


def run_process(argv: Sequence[str]) -> int:
    """Run a command in the foreground and return its exit status."""
    return subprocess.run(list(argv), check=False).returncode  # noqa: S603


def open_in_editor(
    path: Path,
    *,
    launcher: EditorLauncher = run_process,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Open `path` in an editor and wait for it to exit.

    Args:
        path (Path): the file to edit
        launcher (EditorLauncher): runs the editor command, defaults to :func:`run_process`
        environ (Mapping[str, str] | None): environment used to find the editor

    Raises:
        EditorNotFoundError: if no editor can be found

    Returns:
        int: the editor's exit status
    """
    command = find_editor(environ)
    if command is None:
        raise EditorNotFoundError
    return launcher([*command, str(path)])
