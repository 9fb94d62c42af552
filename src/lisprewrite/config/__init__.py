# topmark:header:start
#
#   project      : LispRewrite
#   file         : __init__.py
#   file_relpath : src/lisprewrite/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration for LispRewrite: parser-mode options and logging."""

from __future__ import annotations

from lisprewrite.config.options import (
    MutableRewriteOptions,
    OptionsError,
    RewriteOptions,
    load_options,
)

__all__ = [
    "MutableRewriteOptions",
    "OptionsError",
    "RewriteOptions",
    "load_options",
]
