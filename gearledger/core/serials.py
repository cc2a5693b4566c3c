"""Normalisation helpers for serial numbers, type labels and person names."""

from __future__ import annotations

import re

from .errors import ValidationError

__all__ = [
    "SERIAL_SEPARATOR",
    "normalize_serial",
    "require_serial",
    "require_text",
    "join_serials",
    "split_serials",
    "split_display_name",
    "format_display_name",
]

# previous_serial is stored as "S1, S2"; a comma inside a serial would split it.
SERIAL_SEPARATOR = ", "

_WHITESPACE_RE = re.compile(r"\s+")
_NAME_TAG_RE = re.compile(r"^(.*?)\s*\((.*?)\)$")


def _collapse(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value.strip())


def normalize_serial(raw: str | None) -> str | None:
    """Trim surrounding whitespace and squash repeated inner spaces.

    Case is preserved: serials are matched exactly as printed on the label.
    """

    if raw is None:
        return None
    cleaned = _collapse(str(raw))
    return cleaned or None


def require_serial(raw: str | None) -> str:
    serial = normalize_serial(raw)
    if not serial:
        raise ValidationError("serial_number is required", code="serial_required")
    if "," in serial:
        raise ValidationError(
            "serial_number may not contain a comma",
            code="serial_malformed",
            details={"serial_number": serial},
        )
    return serial


def require_text(raw: str | None, field: str) -> str:
    value = _collapse(str(raw)) if raw is not None else ""
    if not value:
        raise ValidationError(f"{field} is required", code=f"{field}_required")
    return value


def join_serials(serials: list[str]) -> str | None:
    return SERIAL_SEPARATOR.join(serials) if serials else None


def split_serials(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def split_display_name(raw: str) -> tuple[str, str | None]:
    """Split ``"Kim (A)"`` or ``"Kim(A)"`` into ``("Kim", "A")``."""

    cleaned = _collapse(raw)
    match = _NAME_TAG_RE.match(cleaned)
    if not match:
        return cleaned, None
    name = match.group(1).strip()
    tag = match.group(2).strip() or None
    if not name:
        return cleaned, None
    return name, tag


def format_display_name(name: str, duplicate_tag: str | None) -> str:
    return f"{name} ({duplicate_tag})" if duplicate_tag else name
