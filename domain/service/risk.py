import re
from dataclasses import dataclass
from typing import Any

from domain.errors import ValidationError

_NON_PHONE_CHARS_RE = re.compile(r"[^0-9+]")
MAX_PHONE_LENGTH = 20


@dataclass(slots=True, frozen=True)
class Ratios:
    total: int
    completion_ratio: float
    cancel_ratio: float
    risk_ratio: float


def compute_ratios(delivered: int, returned: int, cancelled: int) -> Ratios:
    """Calcula as taxas de conclusão, cancelamento e risco (4 casas decimais)."""
    total = delivered + returned + cancelled
    if total <= 0:
        return Ratios(total=0, completion_ratio=0.0, cancel_ratio=0.0, risk_ratio=0.0)

    return Ratios(
        total=total,
        completion_ratio=round(delivered / total, 4),
        cancel_ratio=round(cancelled / total, 4),
        risk_ratio=round((returned + cancelled) / total, 4),
    )


def normalize_phone(raw: str | None) -> str:
    """
    Reduz o telefone a '+' seguido apenas de dígitos.
    Sem '+' inicial, os zeros à esquerda são removidos antes de prefixar.
    """
    phone = _NON_PHONE_CHARS_RE.sub("", raw or "")
    if not phone:
        return ""
    if phone[0] != "+":
        phone = "+" + phone.lstrip("0")
    return phone


def require_phone(raw: str | None) -> str:
    """Normaliza e exige '+' seguido só de dígitos, cabendo na coluna."""
    phone = normalize_phone(raw)
    digits = phone[1:]
    if not digits or not digits.isdigit():
        raise ValidationError("A valid phone number is required.", code="invalid_phone")
    if len(phone) > MAX_PHONE_LENGTH:
        raise ValidationError(f"phone number longer than {MAX_PHONE_LENGTH} characters", code="invalid_phone")
    return phone


def coerce_counter(name: str, value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer, got {value!r}") from None
    if number < 0:
        raise ValidationError(f"{name} must not be negative, got {number}")
    return number


def format_percentage(ratio: float | None, precision: int = 1) -> str:
    return f"{(ratio or 0.0) * 100:.{precision}f}%"
