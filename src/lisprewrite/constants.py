# topmark:header:start
#
#   project      : LispRewrite
#   file         : constants.py
#   file_relpath : src/lisprewrite/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""LispRewrite Constants."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

try:
    LISPREWRITE_VERSION: str = get_version("lisprewrite")
except PackageNotFoundError:  # running from a source checkout
    LISPREWRITE_VERSION = "0.0.0"

LOG_LEVEL_ENV_VAR: str = "LISPREWRITE_LOG_LEVEL"

# Names of the configuration sources read by `lisprewrite.config.load_options`.
PYPROJECT_TOML_NAME: str = "pyproject.toml"
LISPREWRITE_TOML_NAME: str = "lisprewrite.toml"
PYPROJECT_TOOL_SECTION: str = "lisprewrite"

DEFAULT_COMMENT_START: str = ";"
