# topmark:header:start
#
#   project      : LispRewrite
#   file         : diff.py
#   file_relpath : src/lisprewrite/utils/diff.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Unified diff generation and colourised rendering for rewrite previews."""

from __future__ import annotations

import difflib
from typing import Sequence

from yachalk import chalk

from lisprewrite.config.logging import get_logger

logger = get_logger(__name__)


def unified_patch(original: str, updated: str, path: str) -> list[str]:
    """Return the unified diff between two versions of a file as a list of lines.

    Args:
        original: The text before the rewrite.
        updated: The text after the rewrite.
        path: Name shown in the ``---``/``+++`` header lines.

    Returns:
        The diff lines, each ending with its original line terminator
        (empty when the texts are equal).
    """
    patch = list(
        difflib.unified_diff(
            original.splitlines(keepends=True),
            updated.splitlines(keepends=True),
            fromfile=f"{path} (original)",
            tofile=f"{path} (rewritten)",
        )
    )
    logger.trace("%s: %d diff lines", path, len(patch))
    return patch


def render_patch(patch: Sequence[str] | str, show_line_numbers: bool = False) -> str:
    """Render a colorized preview of a unified diff.

    Args:
        patch: A unified diff as **either** a list/sequence of lines **or** a single
            multiline string.
        show_line_numbers: Whether to prefix output with line numbers.

    Returns:
        The formatted, colorized diff preview.
    """
    if isinstance(patch, str):
        lines: list[str] = patch.splitlines(keepends=False)
    else:
        lines = [line.rstrip("\n") for line in patch]

    def process_line(line: str) -> str:
        content = line.replace("\r", "\\r")
        if not line:
            return content
        match line[0]:
            case "-":
                return chalk.bold.red(content)
            case "+":
                return chalk.bold.green(content)
            case "@":
                return chalk.cyan(content)
            case _:
                return chalk.white(content)

    if show_line_numbers is True:
        return "".join(f"{i:04d}|{process_line(line)}\n" for i, line in enumerate(lines, 1))
    return "".join(f"{process_line(line)}\n" for line in lines)
