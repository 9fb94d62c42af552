# topmark:header:start
#
#   project      : LispRewrite
#   file         : config_resolver.py
#   file_relpath : src/lisprewrite/cli/config_resolver.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Resolve [`RewriteOptions`][lisprewrite.config.options.RewriteOptions] from Click parameters."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from lisprewrite.cli.errors import LispRewriteConfigError, LispRewriteFileNotFoundError
from lisprewrite.config.logging import get_logger
from lisprewrite.config.options import MutableRewriteOptions, OptionsError, load_options
from lisprewrite.constants import LISPREWRITE_TOML_NAME, PYPROJECT_TOML_NAME

if TYPE_CHECKING:
    from lisprewrite.config.logging import RewriteLogger
    from lisprewrite.config.options import RewriteOptions

logger: RewriteLogger = get_logger(__name__)


def discover_config(directory: Path) -> Path | None:
    """Return the configuration file to use in ``directory``, if any.

    ``lisprewrite.toml`` wins over ``pyproject.toml``.
    """
    for name in (LISPREWRITE_TOML_NAME, PYPROJECT_TOML_NAME):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def resolve_options_from_click(
    *,
    config_path: str | None,
    case_fold: bool | None,
    max_depth: int | None,
) -> RewriteOptions:
    """Build the options for a CLI run.

    Resolution order (lowest to highest precedence):
      1. Built-in defaults.
      2. The configuration file: ``--config`` if given, otherwise the one
         discovered in the current working directory.
      3. CLI overrides (``--case-fold``, ``--max-depth``).

    Raises:
        LispRewriteFileNotFoundError: If ``--config`` names a missing file.
        LispRewriteConfigError: If the configuration is invalid.
    """
    path: Path | None
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise LispRewriteFileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        path = discover_config(Path.cwd())

    try:
        draft = load_options(path).thaw() if path is not None else MutableRewriteOptions()
        if case_fold is not None:
            draft.case_fold = case_fold
        if max_depth is not None:
            draft.max_depth = max_depth
        options = draft.freeze()
    except OptionsError as exc:
        raise LispRewriteConfigError(str(exc)) from exc

    logger.debug("Options (from %s): %s", path or "defaults", options)
    return options
