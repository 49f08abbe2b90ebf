"""
Small value checks shared by the request normalizers.
"""
import math
from typing import Any


def is_finite_number(value: Any) -> bool:
    """True for int/float values that are not bool, NaN or infinite."""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def is_non_blank_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())
