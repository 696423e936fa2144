"""Element identifiers — provenance encoded into a tagged id.

Resolved elements are never stored as rows of their own, so their ids carry
where they came from:

- ``tpl:<plan_id>:<YYYY-MM-DD>:<template_element_id>`` — a template element
  materialized for one plan day.
- ``ovr:<override_id>`` — a bare addition backed by an override row.

The prefix is the only thing callers need to tell the two apart.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from fitarc.errors import InvalidElementIdError

TEMPLATE_PREFIX = "tpl"
OVERRIDE_PREFIX = "ovr"


@dataclass(frozen=True)
class TemplateElementRef:
    plan_id: str
    day: date
    element_id: str

    def __str__(self) -> str:
        return f"{TEMPLATE_PREFIX}:{self.plan_id}:{self.day.isoformat()}:{self.element_id}"


@dataclass(frozen=True)
class OverrideRef:
    override_id: str

    def __str__(self) -> str:
        return f"{OVERRIDE_PREFIX}:{self.override_id}"


ElementRef = Union[TemplateElementRef, OverrideRef]


def parse_element_id(value: str) -> ElementRef:
    """Parse an element id into its variant.

    Raises InvalidElementIdError for anything that is not a well-formed
    ``tpl:`` or ``ovr:`` id.
    """
    prefix, sep, rest = (value or "").partition(":")
    if not sep or not rest:
        raise InvalidElementIdError(f"Unsupported element id: {value!r}")

    if prefix == OVERRIDE_PREFIX:
        return OverrideRef(override_id=rest)

    if prefix != TEMPLATE_PREFIX:
        raise InvalidElementIdError(f"Unsupported element id: {value!r}")

    # Template element ids may themselves contain ':'
    parts = rest.split(":", 2)
    if len(parts) != 3 or not all(parts):
        raise InvalidElementIdError(f"Malformed template element id: {value!r}")
    plan_id, day_raw, element_id = parts
    try:
        day = date.fromisoformat(day_raw)
    except ValueError:
        raise InvalidElementIdError(f"Malformed date in element id: {value!r}") from None
    return TemplateElementRef(plan_id=plan_id, day=day, element_id=element_id)


def template_element_id_of(value: Optional[str]) -> Optional[str]:
    """Return the template element id behind a ``tpl:`` id, else None."""
    if not value:
        return None
    try:
        ref = parse_element_id(value)
    except InvalidElementIdError:
        return None
    return ref.element_id if isinstance(ref, TemplateElementRef) else None
