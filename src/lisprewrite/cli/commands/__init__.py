# topmark:header:start
#
#   project      : LispRewrite
#   file         : __init__.py
#   file_relpath : src/lisprewrite/cli/commands/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""LispRewrite CLI subcommands."""

from __future__ import annotations
