"""
contextcli: copy a project's structure and file contents for an AI prompt.

Overview
--------
Run in a project directory, the tool walks the directory tree, keeps the files
whose extension (or bare name, like ``Dockerfile``) is allowed, drops ignored,
oversized and binary files, and builds a markdown document:

1) **Project Files Structure**: a tree with ``├──``/``└──`` connectors.
2) **File Contents**: one fenced code block per included file.

The document is copied to the clipboard, or printed with ``--stdout``.

Ignore patterns come from the configuration file (``.contextcli.json``), from
``--ignore`` and from every ``.gitignore`` between the current directory and
the repository root (disable the latter with ``--no-ignore``).

Usage
-----
    - Copy the current project:
        contextcli

    - Print the tree only, two levels deep:
        contextcli --stdout --no-content --depth 2

    - Extra ignore globs and a 200 KB limit:
        contextcli -i "**/*.snap" "docs/**" --max-size 200

    - Copy a single file:
        contextcli src/app.py

    - Manage the configuration file:
        contextcli config init
        contextcli config add-extension .vue .svelte
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from contextcli import __version__, config_commands
from contextcli.configuration import get_effective_configuration
from contextcli.exceptions import DirectoryAccessError, FileReadError
from contextcli.logging import logger, setup_logging
from contextcli.output import deliver
from contextcli.output_construction import build_document, build_single_file_document
from contextcli.scanner import scan_directory
from contextcli.settings import Settings, build_scan_config

if TYPE_CHECKING:
    from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    """Build the parser of the main command.

    Returns:
        argparse.ArgumentParser: Configured parser.
    """
    p = argparse.ArgumentParser(
        prog="contextcli",
        description=(
            "Copies project context (file structure and contents) to the clipboard for AI prompts. "
            "Run 'contextcli config --help' to manage the configuration file."
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "file",
        nargs="?",
        type=Path,
        default=None,
        help="Optional path to a single file to copy its content.",
    )
    p.add_argument(
        "-i",
        "--ignore",
        action="extend",
        nargs="+",
        default=[],
        help="Glob patterns for files/directories to ignore (repeatable).",
    )
    p.add_argument(
        "--no-ignore",
        action="store_true",
        help="Do not read .gitignore files.",
    )
    p.add_argument(
        "-d",
        "--depth",
        type=int,
        default=None,
        help="Limit the depth of directory scanning.",
    )
    p.add_argument(
        "-s",
        "--stdout",
        action="store_true",
        help="Print the output to stdout instead of copying to clipboard.",
    )
    p.add_argument(
        "--max-size",
        type=int,
        default=None,
        help="Ignore files larger than this size in KB (overrides config).",
    )
    p.add_argument(
        "--no-content",
        action="store_true",
        help="Copy only the file structure tree, without file contents.",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse the main command line into settings.

    Args:
        argv (Sequence[str] | None): Optional CLI args.

    Returns:
        Settings: Parsed settings.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return Settings.model_validate(vars(args))
    except ValidationError as e:
        parser.error("; ".join(f"--{str(err['loc'][0]).replace('_', '-')}: {err['msg']}" for err in e.errors()))


def run_single_file(settings: Settings) -> int:
    """Copy one file, wrapped in a fenced block.

    Args:
        settings (Settings): the command line settings, with ``file`` set

    Returns:
        int: Process exit code.
    """
    path = settings.file
    if path is None or not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    logger.info("Processing single file: %s", path.absolute())
    try:
        document = build_single_file_document(path)
    except FileReadError as e:
        print(f"Error reading file: {e.reason}", file=sys.stderr)
        return 1
    deliver(document, use_stdout=settings.stdout)
    return 0


def run_directory(settings: Settings, root: Path) -> int:
    """Scan `root` and deliver the tree and file contents.

    Args:
        settings (Settings): the command line settings
        root (Path): the scan root

    Returns:
        int: Process exit code.
    """
    log = logger.bind(root=str(root))
    log.info("Processing directory: %s", root)
    configuration = get_effective_configuration(root, log=log)
    if settings.no_ignore:
        log.info("Note: --no-ignore flag is active, ignoring .gitignore files.")
    scan_config = build_scan_config(configuration, settings, root, log=log)
    log.info(
        "Effective settings",
        max_file_size_bytes=scan_config.max_file_size_bytes,
        max_depth=scan_config.max_depth,
        use_gitignore=configuration.use_gitignore and not settings.no_ignore,
        extensions=len(scan_config.extensions),
        ignore_patterns=len(scan_config.ignore_set.matchers),
    )

    try:
        result = scan_directory(root, scan_config, log=log)
    except DirectoryAccessError as e:
        print(f"Error: Cannot access directory {e.path}: {e.reason}", file=sys.stderr)
        return 1
    log.info("Found %d files matching criteria.", len(result.included_files))

    document = build_document(
        result.tree_text,
        result.included_files,
        include_content=not settings.no_content,
        log=log,
    )
    deliver(document, use_stdout=settings.stdout, log=log)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``contextcli`` command.

    Args:
        argv (Sequence[str] | None): Optional CLI arguments.

    Returns:
        int: Process exit code.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "config":
        return config_commands.main(args[1:])

    settings = parse_args(args)
    if settings.log_file:
        setup_logging(settings.log_file)

    started = time.perf_counter()
    if settings.file is not None:
        code = run_single_file(settings)
    else:
        code = run_directory(settings, Path.cwd())
    logger.info("Processed in %d ms.", int((time.perf_counter() - started) * 1000))
    return code


if __name__ == "__main__":
    raise SystemExit(main())
