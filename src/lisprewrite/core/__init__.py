# topmark:header:start
#
#   project      : LispRewrite
#   file         : __init__.py
#   file_relpath : src/lisprewrite/core/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core value model, reader, printer and error types."""

from __future__ import annotations
