from .config import BUDGET_MIN, BUDGET_MAX, BUDGET_STEP
from .exceptions import ValidationError


def clamp_budget(value) -> int:
    """Snaps a slider or typed value onto the 5..500 grid."""
    try:
        b = int(round(float(value) / BUDGET_STEP)) * BUDGET_STEP
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Budget must be a finite number, got {value!r}")
    return max(BUDGET_MIN, min(BUDGET_MAX, b))


def format_budget(value: int) -> str:
    if value >= BUDGET_MAX:
        return f"${BUDGET_MAX}+"
    return f"${value}"
