"""Domain value objects: results and occurrences."""

from app.domain.value_objects.occurrence import Occurrence
from app.domain.value_objects.results import (
    ADMITTED,
    Admitted,
    Rejection,
    ValidationResult,
)

__all__ = [
    "ADMITTED",
    "Admitted",
    "Rejection",
    "ValidationResult",
    "Occurrence",
]
