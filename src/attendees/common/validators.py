from __future__ import annotations

from typing import Iterable

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_known(values: Iterable[str], allowed: Iterable[str], field_name: str) -> tuple[str, ...]:
    allowed = set(allowed)
    out = []
    for v in values:
        v = (v or "").strip()
        if not v:
            continue
        if v not in allowed:
            raise ValidationError(f"{field_name}: unknown value {v!r}")
        if v not in out:
            out.append(v)
    return tuple(out)
