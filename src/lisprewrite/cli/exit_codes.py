# topmark:header:start
#
#   project      : LispRewrite
#   file         : exit_codes.py
#   file_relpath : src/lisprewrite/cli/exit_codes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exit codes for the LispRewrite CLI.

The codes follow the BSD `sysexits` convention where practical. ``WOULD_CHANGE=2``
is the one deliberate divergence: it signals that ``--check`` found expressions
to rewrite. Click's own usage errors also exit with 2, so tests assert
``result.exception is None`` to tell the two apart.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standardized exit codes for the LispRewrite CLI.

    Attributes:
        SUCCESS: Successful execution with no errors.
        FAILURE: Generic failure. Prefer a more specific code if available.
        WOULD_CHANGE: ``--check``: at least one file would be rewritten.
        USAGE_ERROR: Invalid flags or arguments (including unreadable
            ``--replace`` forms). Mirrors BSD ``EX_USAGE (64)``.
        MALFORMED_INPUT: A source file is not valid Lisp. Mirrors BSD
            ``EX_DATAERR (65)``.
        FILE_NOT_FOUND: Input path does not exist. Mirrors BSD ``EX_NOINPUT (66)``.
        ENGINE_ERROR: An internal consistency check of the rewrite engine
            failed. Mirrors BSD ``EX_SOFTWARE (70)``.
        IO_ERROR: I/O or decoding error reading/writing a file. Mirrors BSD
            ``EX_IOERR (74)``.
        CONFIG_ERROR: Invalid configuration file. Mirrors BSD ``EX_CONFIG (78)``.
    """

    SUCCESS = 0
    FAILURE = 1
    WOULD_CHANGE = 2  # deliberate divergence from sysexits; see module docstring

    USAGE_ERROR = 64  # EX_USAGE
    MALFORMED_INPUT = 65  # EX_DATAERR
    FILE_NOT_FOUND = 66  # EX_NOINPUT
    ENGINE_ERROR = 70  # EX_SOFTWARE
    IO_ERROR = 74  # EX_IOERR
    CONFIG_ERROR = 78  # EX_CONFIG
