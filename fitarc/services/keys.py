"""Key normalisation shared by template loading, selection and diffing."""
from __future__ import annotations

import re
from typing import Any, Iterable, Optional

_WS = re.compile(r"\s+")


def normalize_key(value: Optional[str]) -> str:
    """``" Full Gym "`` -> ``"full_gym"``."""
    return _WS.sub("_", (value or "").strip().lower())


def normalize_text(value: Optional[str]) -> Optional[str]:
    """Strip whitespace; blank strings count as unset."""
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None


def normalize_keys(values: Optional[Iterable[str]]) -> list[str]:
    return [k for k in (normalize_key(v) for v in (values or [])) if k]


def normalize_key_map(raw: Any) -> Optional[dict[str, str]]:
    """Clean a stored tag -> template id map.

    Keys are normalised, non-string values dropped; an empty result is None.
    """
    if not isinstance(raw, dict):
        return None
    cleaned = {
        normalize_key(k): v
        for k, v in raw.items()
        if isinstance(v, str) and v and normalize_key(k)
    }
    return cleaned or None
