# topmark:header:start
#
#   project      : LispRewrite
#   file         : __main__.py
#   file_relpath : src/lisprewrite/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Allow ``python -m lisprewrite``."""

from lisprewrite.cli.main import cli

if __name__ == "__main__":
    cli()
