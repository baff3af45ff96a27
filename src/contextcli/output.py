"""Deliver the generated document to the clipboard or a text stream."""

from __future__ import annotations

import sys
from enum import StrEnum, auto
from typing import TYPE_CHECKING, TextIO

import pyperclip

from contextcli.logging import logger

if TYPE_CHECKING:
    import structlog


class Sink(StrEnum):
    """Where a document ended up."""

    CLIPBOARD = auto()
    STREAM = auto()


def deliver(
    content: str,
    *,
    use_stdout: bool,
    stream: TextIO | None = None,
    log: structlog.BoundLogger | None = None,
) -> Sink:
    """Copy `content` to the clipboard, or write it to `stream`.

    When the clipboard is unavailable the document is written to `stream`
    instead, so it is never lost.

    Args:
        content (str): the document
        use_stdout (bool): skip the clipboard and write to `stream`
        stream (TextIO | None): the fallback stream, defaults to ``sys.stdout``
        log (structlog.BoundLogger | None): diagnostics sink, defaults to the package logger

    Returns:
        Sink: the sink that received the document
    """
    log = log or logger
    stream = stream or sys.stdout
    if not use_stdout:
        try:
            pyperclip.copy(content)
        except pyperclip.PyperclipException as e:
            log.error("Error copying to clipboard: %s", e)
        else:
            log.info("Output successfully copied to clipboard.")
            return Sink.CLIPBOARD
    stream.write(content)
    if not content.endswith("\n"):
        stream.write("\n")
    stream.flush()
    return Sink.STREAM
