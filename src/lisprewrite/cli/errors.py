# topmark:header:start
#
#   project      : LispRewrite
#   file         : errors.py
#   file_relpath : src/lisprewrite/cli/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exceptions for the LispRewrite CLI.

Usage:
    Raise these exceptions in CLI commands to signal errors with standardized
    messages and exit codes. Library errors from `lisprewrite.core.errors` are
    translated with [`from_rewrite_error`][lisprewrite.cli.errors.from_rewrite_error].

Styling:
    Exceptions prefer the project console if available (see `show()`); if no console
    is present in the Click context, they fall back to Click's default styling.
"""

from __future__ import annotations

from typing import IO, Any

import click

from lisprewrite.cli.exit_codes import ExitCode
from lisprewrite.core.errors import EngineInvariantError, MalformedInputError, RewriteError


class LispRewriteError(click.ClickException):
    """Base class for all LispRewrite CLI errors."""

    exit_code = ExitCode.FAILURE

    def format_message(self) -> str:  # pragma: no cover - trivial
        """Return the plain error message text.

        Notes:
            - Unlike Click's default, this method does not add color.
            - Colorization is applied in `show()` when a project console is present.
        """
        return str(getattr(self, "message", ""))

    def show(self, file: IO[Any] | None = None) -> None:  # pragma: no cover - Click prints errors
        """Display the error using the project console if available.

        Falls back to Click's default error display when no console is present.
        """
        ctx = click.get_current_context(silent=True)
        if ctx is not None and isinstance(getattr(ctx, "obj", None), dict):
            console = ctx.obj.get("console")
            if console is not None:
                console.error(console.styled(self.format_message(), fg="bright_red"))
                return
        super().show(file)


class LispRewriteUsageError(LispRewriteError):
    """Error for command-line invocation errors (invalid flags/args)."""

    exit_code = ExitCode.USAGE_ERROR


class LispRewriteConfigError(LispRewriteError):
    """Error for configuration errors (invalid TOML or option values)."""

    exit_code = ExitCode.CONFIG_ERROR


class LispRewriteFileNotFoundError(LispRewriteError):
    """Error when an input path does not exist."""

    exit_code = ExitCode.FILE_NOT_FOUND


class LispRewriteIOError(LispRewriteError):
    """Error for I/O or decoding errors reading/writing files."""

    exit_code = ExitCode.IO_ERROR


class LispRewriteMalformedInputError(LispRewriteError):
    """Error for source files that are not valid Lisp."""

    exit_code = ExitCode.MALFORMED_INPUT


class LispRewriteEngineError(LispRewriteError):
    """Error for internal rewrite engine failures."""

    exit_code = ExitCode.ENGINE_ERROR


def from_rewrite_error(exc: RewriteError, source: str) -> LispRewriteError:
    """Return the CLI error reporting library error ``exc`` raised for ``source``."""
    message = f"{source}: {exc}"
    if isinstance(exc, MalformedInputError):
        return LispRewriteMalformedInputError(message)
    if isinstance(exc, EngineInvariantError):
        return LispRewriteEngineError(f"{message} [{exc.kind}]")
    return LispRewriteError(message)
