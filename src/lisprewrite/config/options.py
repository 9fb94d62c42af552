# topmark:header:start
#
#   project      : LispRewrite
#   file         : options.py
#   file_relpath : src/lisprewrite/config/options.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Parser-mode options for a rewrite pass.

Options are passed explicitly to the reader and the driver; there is no ambient
or global parser state. Build options with
[`MutableRewriteOptions`][lisprewrite.config.options.MutableRewriteOptions]
(optionally from a TOML file), then ``freeze()`` them into an immutable
[`RewriteOptions`][lisprewrite.config.options.RewriteOptions].

TOML layout (either the top level of ``lisprewrite.toml`` or the
``[tool.lisprewrite]`` table of ``pyproject.toml``):

```toml
case_fold = false
comment_start = ";"
max_depth = 10000
```
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from lisprewrite.config.logging import get_logger
from lisprewrite.constants import (
    DEFAULT_COMMENT_START,
    PYPROJECT_TOML_NAME,
    PYPROJECT_TOOL_SECTION,
)

if TYPE_CHECKING:
    from pathlib import Path

    from lisprewrite.config.logging import RewriteLogger

logger: RewriteLogger = get_logger(__name__)


class OptionsError(ValueError):
    """Raised when a configuration source cannot be parsed or validated."""


@dataclass(frozen=True)
class RewriteOptions:
    """Immutable parser-mode options.

    Attributes:
        case_fold (bool): Read symbol names lower-cased. This only affects the
            values offered to the predicate; unmatched text is never rewritten.
        comment_start (str): Single character introducing a line comment.
        max_depth (int | None): Maximum nesting depth the engine will descend
            into; ``None`` disables the guard.
    """

    case_fold: bool = False
    comment_start: str = DEFAULT_COMMENT_START
    max_depth: int | None = None

    def thaw(self) -> MutableRewriteOptions:
        """Return a mutable copy of these options."""
        return MutableRewriteOptions(
            case_fold=self.case_fold,
            comment_start=self.comment_start,
            max_depth=self.max_depth,
        )


@dataclass
class MutableRewriteOptions:
    """Mutable builder for [`RewriteOptions`][lisprewrite.config.options.RewriteOptions]."""

    case_fold: bool = False
    comment_start: str = DEFAULT_COMMENT_START
    max_depth: int | None = None

    def freeze(self) -> RewriteOptions:
        """Validate and return an immutable snapshot.

        Raises:
            OptionsError: If ``comment_start`` is not a single non-syntax character
                or ``max_depth`` is not positive.
        """
        if len(self.comment_start) != 1 or self.comment_start in "()[]\"'`,#?\\. \t\n":
            raise OptionsError(f"invalid comment_start: {self.comment_start!r}")
        if self.max_depth is not None and self.max_depth <= 0:
            raise OptionsError(f"max_depth must be positive, got {self.max_depth}")
        return RewriteOptions(
            case_fold=self.case_fold,
            comment_start=self.comment_start,
            max_depth=self.max_depth,
        )

    def update_from_dict(self, data: dict[str, Any]) -> MutableRewriteOptions:
        """Apply known keys from a TOML table; unknown keys are logged and ignored."""
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown option: %s", key)
                continue
            setattr(self, key, value)
        return self


def load_options(path: Path) -> RewriteOptions:
    """Load options from a TOML file.

    For ``pyproject.toml`` the ``[tool.lisprewrite]`` table is used; any other
    file is read from its top level. A missing table yields the defaults.

    Args:
        path (Path): TOML file to read.

    Returns:
        RewriteOptions: The frozen options.

    Raises:
        OptionsError: If the file is not valid TOML or holds invalid values.
    """
    try:
        doc: dict[str, Any] = tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()
    except TomlkitParseError as exc:
        raise OptionsError(f"Error parsing TOML document {path}: {exc}") from exc

    table: Any = doc
    if path.name == PYPROJECT_TOML_NAME:
        table = doc.get("tool", {}).get(PYPROJECT_TOOL_SECTION, {})
    if not isinstance(table, dict):
        raise OptionsError(f"{path}: expected a table of options")

    logger.debug("Loaded options from %s: %s", path, table)
    return MutableRewriteOptions().update_from_dict(table).freeze()
