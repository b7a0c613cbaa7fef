from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from core.errors import FieldValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class FieldResult(Generic[T]):
    """Parsed value, or the neutral value plus the validation problem."""

    value: T
    error: Optional[FieldValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def or_else(self, fallback: Callable[[], T]) -> T:
        return self.value if self.ok else fallback()


def parse_float(
    field: str,
    raw: Any,
    neutral: float = 0.0,
    minimum: Optional[float] = 0.0,
) -> FieldResult[float]:
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return FieldResult(neutral, FieldValidationError(field, str(raw)))
    # nan/inf parse as floats but never describe a real charge
    if value != value or value in (float("inf"), float("-inf")):
        return FieldResult(neutral, FieldValidationError(field, str(raw)))
    if minimum is not None and value < minimum:
        return FieldResult(neutral, FieldValidationError(field, str(raw)))
    return FieldResult(value)


def parse_int(
    field: str,
    raw: Any,
    neutral: int = 0,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> FieldResult[int]:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return FieldResult(neutral, FieldValidationError(field, str(raw), f"{field} is invalid"))
    if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
        return FieldResult(neutral, FieldValidationError(field, str(raw), f"{field} is invalid"))
    return FieldResult(value)


def warn_invalid(log, result: FieldResult) -> None:
    if result.error is not None:
        log.warning(result.error.message, field=result.error.field, value=result.error.value)
