from __future__ import annotations

from todoapp.domain.common.errors import ValidationError

MAX_NAME_LENGTH = 200


def validate_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Task name is required.")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationError(f"Task name is too long (max {MAX_NAME_LENGTH} chars).")
    return cleaned


def validate_retention_days(days: int) -> int:
    if days < 1:
        raise ValidationError("Retention must be at least one day.")
    return days
