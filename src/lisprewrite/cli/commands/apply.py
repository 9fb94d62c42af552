# topmark:header:start
#
#   project      : LispRewrite
#   file         : apply.py
#   file_relpath : src/lisprewrite/cli/commands/apply.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""LispRewrite `apply` command.

Replaces every expression equal to a ``--replace FORM VALUE`` pair in the given
files. By default the rewritten text is printed; ``--write`` rewrites the files
in place, ``--diff`` prints a unified diff and ``--check`` only reports which
files would change (exit code ``WOULD_CHANGE``).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from lisprewrite.cli.config_resolver import resolve_options_from_click
from lisprewrite.cli.errors import (
    LispRewriteFileNotFoundError,
    LispRewriteIOError,
    LispRewriteUsageError,
    from_rewrite_error,
)
from lisprewrite.cli.exit_codes import ExitCode
from lisprewrite.cli.options import common_config_options
from lisprewrite.config.logging import get_logger
from lisprewrite.core.errors import ReaderError, RewriteError
from lisprewrite.core.reader import read_all
from lisprewrite.engine.driver import Driver
from lisprewrite.engine.predicates import chain, replace_equal
from lisprewrite.utils.diff import render_patch, unified_patch

if TYPE_CHECKING:
    from lisprewrite.cli.console import ClickConsole
    from lisprewrite.config.logging import RewriteLogger
    from lisprewrite.config.options import RewriteOptions
    from lisprewrite.engine.types import Predicate

logger: RewriteLogger = get_logger(__name__)

STDIN_SENTINEL = "-"


def parse_single_form(text: str, what: str, options: RewriteOptions) -> Any:
    """Read exactly one expression from a command-line argument.

    Raises:
        LispRewriteUsageError: If ``text`` is not exactly one readable expression.
    """
    try:
        values = read_all(text, options)
    except ReaderError as exc:
        raise LispRewriteUsageError(f"Cannot read {what} {text!r}: {exc}") from exc
    if len(values) != 1:
        raise LispRewriteUsageError(
            f"{what} {text!r} must be exactly one expression, got {len(values)}"
        )
    return values[0]


def build_predicate(pairs: tuple[tuple[str, str], ...], options: RewriteOptions) -> Predicate:
    """Return the predicate applying every ``(FORM, VALUE)`` pair, first match wins."""
    return chain(
        *(
            replace_equal(
                parse_single_form(form, "FORM", options),
                parse_single_form(value, "VALUE", options),
            )
            for form, value in pairs
        )
    )


def read_source(name: str) -> str:
    """Return the contents of file ``name`` (STDIN for ``-``), line endings untouched."""
    if name == STDIN_SENTINEL:
        return click.get_text_stream("stdin").read()
    path = Path(name)
    if not path.exists():
        raise LispRewriteFileNotFoundError(f"File not found: {name}")
    try:
        with path.open(encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise LispRewriteIOError(f"Cannot read {name}: {exc}") from exc


def write_source(name: str, text: str) -> None:
    """Write ``text`` back to file ``name``."""
    try:
        with Path(name).open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as exc:
        raise LispRewriteIOError(f"Cannot write {name}: {exc}") from exc


@click.command(
    name="apply",
    help="Replace every expression equal to FORM with VALUE in FILES ('-' reads STDIN).",
)
@click.argument("files", nargs=-1, required=True)
@click.option(
    "--replace",
    "-r",
    "pairs",
    nargs=2,
    multiple=True,
    required=True,
    metavar="FORM VALUE",
    help="Expression to replace and its replacement (repeatable; first match wins).",
)
@click.option(
    "--write",
    "-w",
    "mode",
    flag_value="write",
    help="Rewrite the files in place.",
)
@click.option(
    "--diff",
    "mode",
    flag_value="diff",
    help="Print a unified diff instead of the rewritten text.",
)
@click.option(
    "--check",
    "mode",
    flag_value="check",
    help="Only report files that would change (exit code 2 if any).",
)
@common_config_options
@click.pass_context
def apply_command(
    ctx: click.Context,
    *,
    files: tuple[str, ...],
    pairs: tuple[tuple[str, str], ...],
    mode: str | None,
    config_path: str | None,
    case_fold: bool | None,
    max_depth: int | None,
) -> None:
    """Apply ``--replace`` pairs to FILES."""
    ctx.ensure_object(dict)
    console: ClickConsole = ctx.obj["console"]
    verbosity: int = ctx.obj.get("verbosity_level", 0)

    if mode == "write" and STDIN_SENTINEL in files:
        raise LispRewriteUsageError("--write cannot be used with STDIN ('-').")

    options = resolve_options_from_click(
        config_path=config_path, case_fold=case_fold, max_depth=max_depth
    )
    predicate = build_predicate(pairs, options)

    # Nothing is written or printed until every file has been rewritten.
    results: list[tuple[str, str, str, int]] = []
    for name in files:
        original = read_source(name)
        driver = Driver(original, predicate, options)
        try:
            updated = driver.run()
        except RewriteError as exc:
            raise from_rewrite_error(exc, name) from exc
        logger.info("%s: %d replacement(s)", name, driver.replacements)
        results.append((name, original, updated, driver.replacements))

    changed: list[str] = [name for name, original, updated, _ in results if updated != original]
    for name, original, updated, replacements in results:
        if mode == "check":
            if updated != original and verbosity >= 0:
                console.print(f"would rewrite {name}")
        elif mode == "diff":
            patch = unified_patch(original, updated, name)
            if patch:
                if console.enable_color:
                    console.print(render_patch(patch), nl=False)
                else:
                    console.print("".join(patch), nl=False)
        elif mode == "write":
            if updated != original:
                write_source(name, updated)
                if verbosity > 0:
                    console.print(f"rewrote {name} ({replacements} replacement(s))")
        else:
            console.print(updated, nl=False)

    if verbosity > 0 and mode != "write":
        console.warn(f"{len(changed)} of {len(files)} file(s) changed")
    if mode == "check" and changed:
        ctx.exit(ExitCode.WOULD_CHANGE)
