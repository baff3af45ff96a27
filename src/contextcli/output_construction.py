from __future__ import annotations

import io
from typing import TYPE_CHECKING

from contextcli.exceptions import FileReadError
from contextcli.file_manipulation import iter_text_lines
from contextcli.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    import structlog

    from contextcli.config import FileRecord

STRUCTURE_HEADER = "# Project Files Structure"
CONTENTS_HEADER = "# File Contents"


def write_file_block(
    out: io.StringIO,
    rec: FileRecord,
    *,
    log: structlog.BoundLogger | None = None,
) -> None:
    """Write one file as a markdown heading and a fenced code block.

    A read failure, even halfway through the file, leaves an inline
    ``[Error reading file: ...]`` marker inside the fence.

    Args:
        out (io.StringIO): the buffer to write to
        rec (FileRecord): the file to render
        log (structlog.BoundLogger | None): diagnostics sink, defaults to the package logger
    """
    log = log or logger
    out.write(f"## ./{rec.rel}\n")
    out.write(f"```{rec.language}\n")
    try:
        for line in iter_text_lines(rec.path):
            out.write(f"{line}\n")
    except FileReadError as e:
        out.write(f"[Error reading file: {e.reason}]\n")
        log.warning("Failed to read content of %s: %s", rec.rel, e.reason)
    out.write("```\n\n")


def render_contents(
    recs: Sequence[FileRecord],
    *,
    log: structlog.BoundLogger | None = None,
) -> str:
    """Render the content blocks of the included files.

    Files are ordered by absolute path (code point order), independently of
    the order they were collected in.

    Args:
        recs (Sequence[FileRecord]): the included files
        log (structlog.BoundLogger | None): diagnostics sink, defaults to the package logger

    Returns:
        str: the concatenated content blocks
    """
    out = io.StringIO()
    for rec in sorted(recs, key=lambda r: str(r.path)):
        write_file_block(out, rec, log=log)
    return out.getvalue()


def build_document(
    tree_text: str,
    recs: Sequence[FileRecord],
    *,
    include_content: bool = True,
    log: structlog.BoundLogger | None = None,
) -> str:
    """Assemble the final document: the tree section, then the file contents.

    The contents section is only present when `include_content` is set and at
    least one file was included.

    Args:
        tree_text (str): the tree lines, each terminated by a newline
        recs (Sequence[FileRecord]): the included files
        include_content (bool): whether to render file contents
        log (structlog.BoundLogger | None): diagnostics sink, defaults to the package logger

    Returns:
        str: the document to hand over to the output sink
    """
    out = io.StringIO()
    out.write(f"{STRUCTURE_HEADER}\n\n")
    out.write(tree_text)
    out.write("\n")
    if include_content and recs:
        out.write(f"---\n\n{CONTENTS_HEADER}\n\n")
        out.write(render_contents(recs, log=log))
    return out.getvalue()


def build_single_file_document(path: Path) -> str:
    """Render one file on its own, bypassing the directory scan.

    Args:
        path (Path): the file to render

    Raises:
        FileReadError: if the file cannot be read

    Returns:
        str: a ``# File:`` heading followed by an untagged fenced block
    """
    content = "\n".join(iter_text_lines(path))
    return f"# File: {path.name}\n\n```\n{content}\n```"
