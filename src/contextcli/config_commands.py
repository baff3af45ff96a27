"""``contextcli config`` sub-commands: inspect and edit the configuration file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from contextcli.config import CONFIG_FILE_NAMES, DEFAULT_EXTENSIONS
from contextcli.configuration import (
    ProjectConfiguration,
    add_extensions,
    dump_configuration,
    find_config_file,
    get_effective_configuration,
    load_configuration,
    remove_extensions,
    save_configuration,
)
from contextcli.editor import open_in_editor, run_process
from contextcli.exceptions import ConfigFileNotFoundError, ConfigurationError, EditorNotFoundError
from contextcli.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from contextcli.editor import EditorLauncher

DEFAULT_CONFIG_FILE_NAME = CONFIG_FILE_NAMES[0]


def _require_config_file(cwd: Path) -> Path:
    path = find_config_file(cwd)
    if path is None:
        raise ConfigFileNotFoundError(start=cwd)
    return path


def show(cwd: Path) -> int:
    """Print the effective configuration as JSON."""
    config = get_effective_configuration(cwd)
    sys.stdout.write(dump_configuration(config))
    return 0


def show_path(cwd: Path) -> int:
    """Print the configuration file in use."""
    found = find_config_file(cwd)
    if found is None:
        print(
            f"No configuration file ({DEFAULT_CONFIG_FILE_NAME}) found in the current directory "
            "or parent directories.",
        )
    else:
        print(f"Configuration file found at: {found}")
    return 0


def init(cwd: Path) -> int:
    """Write a default configuration file into `cwd` unless one exists."""
    target = cwd / DEFAULT_CONFIG_FILE_NAME
    if target.exists():
        print(f"Configuration file '{target}' already exists.")
        return 0
    higher = find_config_file(cwd)
    if higher is not None and higher.parent != cwd.resolve():
        print(f"Note: Another config file exists higher up at '{higher}'.")
    save_configuration(ProjectConfiguration(), target)
    print(f"Default configuration file created at '{target}'.")
    return 0


def edit(cwd: Path, *, launcher: EditorLauncher = run_process) -> int:
    """Open the configuration file in an editor, creating a default one if needed.

    Once the editor exits, the file is loaded again and a warning is printed if
    it no longer parses.

    Args:
        cwd (Path): the current directory
        launcher (EditorLauncher): runs the editor command

    Returns:
        int: Process exit code.
    """
    target = find_config_file(cwd)
    if target is None:
        target = cwd / DEFAULT_CONFIG_FILE_NAME
        print(f"Configuration file not found. Creating default '{target.name}' in the current directory.")
        save_configuration(ProjectConfiguration(), target)
    else:
        print(f"Found configuration file at: {target}")

    try:
        status = open_in_editor(target, launcher=launcher)
    except EditorNotFoundError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error launching editor: {e}", file=sys.stderr)
        return 1
    logger.info("Editor exited with status %d", status)

    try:
        load_configuration(target)
    except ConfigurationError as e:
        print(f"Warning: {e.message} Default configuration will be used until it is fixed.", file=sys.stderr)
    return 0


def list_extensions(cwd: Path) -> int:
    """Print the configured extensions, one per line."""
    config = get_effective_configuration(cwd)
    print("Configured extensions:")
    if not config.extensions:
        print("(No extensions configured)")
    for ext in config.extensions:
        print(f"- {ext}")
    return 0


def _modify_extensions(
    cwd: Path,
    change: Callable[[ProjectConfiguration], tuple[ProjectConfiguration, int]],
    *,
    verb: str,
) -> int:
    target = _require_config_file(cwd)
    print(f"Modifying configuration file: {target}")
    updated, count = change(load_configuration(target))
    if count == 0:
        print(f"No extensions were {verb}.")
        return 0
    save_configuration(updated, target)
    print(f"Successfully {verb} {count} extension(s).")
    return 0


def add_extension(cwd: Path, extensions: Sequence[str]) -> int:
    """Add extensions to the configuration file."""
    return _modify_extensions(cwd, lambda c: add_extensions(c, extensions), verb="added")


def remove_extension(cwd: Path, extensions: Sequence[str]) -> int:
    """Remove extensions from the configuration file."""
    return _modify_extensions(cwd, lambda c: remove_extensions(c, extensions), verb="removed")


def reset_extensions(cwd: Path) -> int:
    """Replace the configured extensions with the defaults."""
    target = _require_config_file(cwd)
    print(f"Modifying configuration file: {target}")
    config = load_configuration(target)
    save_configuration(config.model_copy(update={"extensions": list(DEFAULT_EXTENSIONS)}), target)
    print("Successfully reset extensions to default.")
    return 0


_SIMPLE_COMMANDS: dict[str, Callable[[Path], int]] = {
    "show": show,
    "path": show_path,
    "init": init,
    "list-extensions": list_extensions,
    "reset-extensions": reset_extensions,
}


def build_parser() -> argparse.ArgumentParser:
    """Build parser for the ``config`` subcommand.

    Returns:
        argparse.ArgumentParser: Configured parser.
    """
    parser = argparse.ArgumentParser(
        prog="contextcli config",
        description=f"Manage the {DEFAULT_CONFIG_FILE_NAME} configuration file.",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("edit", help="Open the configuration file in the default editor.")
    sub.add_parser("show", help="Show the effective configuration.")
    sub.add_parser("path", help="Show the path to the used configuration file.")
    sub.add_parser("init", help="Create a default configuration file in the current directory.")
    sub.add_parser("list-extensions", help="List the configured file extensions.")
    add = sub.add_parser("add-extension", help="Add one or more extensions to the configuration.")
    add.add_argument("extensions", nargs="+", help="Extensions to add (e.g. .cshtml .razor).")
    remove = sub.add_parser("remove-extension", help="Remove one or more extensions from the configuration.")
    remove.add_argument("extensions", nargs="+", help="Extensions to remove (e.g. .txt .log).")
    sub.add_parser("reset-extensions", help="Reset extensions to the default list.")
    return parser


def main(argv: Sequence[str] | None = None, *, launcher: EditorLauncher = run_process) -> int:
    """Run a ``config`` subcommand in the current directory.

    Args:
        argv (Sequence[str] | None): Optional CLI arguments (after ``config``).
        launcher (EditorLauncher): runs the editor for ``config edit``

    Returns:
        int: Process exit code.
    """
    args = build_parser().parse_args(argv)
    cwd = Path.cwd()
    try:
        if args.command == "edit":
            return edit(cwd, launcher=launcher)
        if args.command in {"add-extension", "remove-extension"}:
            modify = add_extension if args.command == "add-extension" else remove_extension
            return modify(cwd, args.extensions)
        return _SIMPLE_COMMANDS[args.command](cwd)
    except ConfigFileNotFoundError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        print("Run 'contextcli config init' to create one first.", file=sys.stderr)
        return 1
    except ConfigurationError as e:
        print(f"Error: {e.message} ({e.path})", file=sys.stderr)
        return 1
