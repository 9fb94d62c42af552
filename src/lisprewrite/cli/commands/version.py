# topmark:header:start
#
#   project      : LispRewrite
#   file         : version.py
#   file_relpath : src/lisprewrite/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""LispRewrite `version` command.

Prints the current LispRewrite version as installed in the active Python environment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lisprewrite.constants import LISPREWRITE_VERSION

if TYPE_CHECKING:
    from lisprewrite.cli.console import ClickConsole


@click.command(
    name="version",
    help="Show the current version of LispRewrite.",
)
def version_command() -> None:
    """Show the current version of LispRewrite."""
    ctx = click.get_current_context()
    ctx.ensure_object(dict)
    console: ClickConsole = ctx.obj["console"]
    if ctx.obj.get("verbosity_level", 0) > 0:
        console.print(console.styled("LispRewrite version:", bold=True, underline=True))
        console.print(f"    {console.styled(LISPREWRITE_VERSION, bold=True)}")
    else:
        console.print(console.styled(LISPREWRITE_VERSION, bold=True))
