from __future__ import annotations

import os

from ._constants import CONTEXT_LINES
from ._log import LOG


def read_lines(path: str | None) -> list[str]:
    """
    Current contents of `path`, one entry per line.

    Missing or unreadable files yield an empty list; relative paths are
    resolved against the working directory only.
    """
    if not path or not os.path.isfile(path):
        return []

    try:
        with open(path, encoding='utf-8', errors='replace') as f:
            return f.readlines()
    except OSError:
        LOG.debug('Could not read source of %s', path, exc_info=True)
        return []


def _slice(lines: list[str], start: int, count: int) -> list[str]:
    if start < 1:
        return []

    offset = start - 1
    length = min(count, len(lines) - offset)

    if length <= 0:
        return []

    return [line.rstrip() for line in lines[offset:offset + length]]


def get_lines(path: str | None, start: int, count: int) -> list[str]:
    """
    Return up to `count` lines of `path` starting at the 1-based line
    `start`, with trailing whitespace stripped.
    """
    if start < 1:
        return []
    return _slice(read_lines(path), start, count)


def get_line(path: str | None, lineno: int | None) -> str | None:
    if lineno is None:
        return None
    lines = get_lines(path, lineno, 1)
    return lines[0] if lines else None


def source_context(
        path: str | None,
        lineno: int | None,
        window: int = CONTEXT_LINES,
) -> tuple[list[str], str | None, list[str]]:
    """
    Source lines around `lineno`: (pre_context, context_line, post_context).

    `pre_context` is clipped at the top of the file, so fewer than
    `window` lines may be returned.
    """
    if not path or lineno is None or lineno < 1:
        return [], None, []

    # one read, so the three parts agree
    lines = read_lines(path)

    pre_start = max(1, lineno - window)
    pre_context = _slice(lines, pre_start, lineno - pre_start)
    current = _slice(lines, lineno, 1)
    post_context = _slice(lines, lineno + 1, window)

    return pre_context, (current[0] if current else None), post_context
