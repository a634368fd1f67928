"""Rule options: validated, immutable configuration for one analysis pass."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError

from . import constants

logger = logging.getLogger(__name__)


class InvalidOptionsError(ValueError):
    """Raised when rule options fail schema validation."""


class FillOptions(BaseModel):
    """Toggles that downgrade reference-shaped constructs to "safe".

    Both options default to True: sharing one function or one regex across
    every array slot is treated as intentional unless configured otherwise.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    can_fill_with_function: StrictBool = Field(
        default=True, alias=constants.OPT_CAN_FILL_WITH_FUNCTION
    )
    can_fill_with_regexp: StrictBool = Field(
        default=True, alias=constants.OPT_CAN_FILL_WITH_REGEXP
    )

    def to_dict(self) -> dict[str, bool]:
        return self.model_dump(by_alias=True)


def load_options(raw: Any = None) -> FillOptions:
    """Validate raw rule options into a :class:`FillOptions`.

    Accepts ``None`` (defaults), a mapping, or a rule-options list holding at
    most one mapping (``[{"canFillWithRegexp": false}]``).

    Raises:
        InvalidOptionsError: On unknown keys, non-boolean values, or a
            malformed container.
    """
    if isinstance(raw, list):
        if len(raw) > 1:
            raise InvalidOptionsError(
                f"Expected at most one options object, got {len(raw)}"
            )
        raw = raw[0] if raw else None
    if raw is None:
        return FillOptions()
    if not isinstance(raw, Mapping):
        raise InvalidOptionsError(
            f"Rule options must be an object, got {type(raw).__name__}"
        )
    try:
        return FillOptions.model_validate(dict(raw))
    except ValidationError as exc:
        raise InvalidOptionsError(str(exc)) from exc


def load_options_json(text: str) -> FillOptions:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidOptionsError(f"Rule options are not valid JSON: {exc}") from exc
    return load_options(raw)


def load_options_file(path: str | Path) -> FillOptions:
    """Read rule options from a JSON file."""
    logger.info("Loading rule options from %s", path)
    return load_options_json(Path(path).read_text(encoding="utf-8"))
