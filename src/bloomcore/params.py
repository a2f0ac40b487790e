"""Sizing math for Bloom filters.

All helpers are pure. ``n`` is the number of elements, ``p`` the false
positive probability, ``m`` the bit length and ``k`` the number of hashes.
"""

import math
import sys
from numbers import Integral

from bloomcore.errors import FilterParameterError

_LN2 = math.log(2)
_MAX_RATE = math.nextafter(1.0, 0.0)
_MIN_RATE = sys.float_info.min


def best_capacity(n: float, p: float) -> int:
    """Smallest bit length that keeps ``n`` elements under error rate ``p``.

    m = -n * ln(p) / (ln 2)^2
    """
    return int(math.ceil(-1 * (n * math.log(p)) / (_LN2**2)))


def best_hash_count(n: float, m: int) -> int:
    """Hash count minimising the false positive rate for ``n`` and ``m``.

    k = ln 2 * m / n
    """
    return int(math.ceil((_LN2 * m) / n))


def best_expected_elements(k: int, m: int) -> int:
    """Element count for which ``k`` hashes over ``m`` bits is optimal."""
    return int(math.ceil((_LN2 * m) / k))


def best_error_rate(k: int, m: int, inserted_elements: float) -> float:
    """Theoretical false positive probability after ``inserted_elements`` adds.

    p = (1 - e^(-k * n / m))^k
    """
    return math.pow(1 - math.exp(-k * inserted_elements / float(m)), k)


def clamp_error_rate(rate: float) -> float:
    """Pull a derived rate that rounded to 0.0 or 1.0 back into the open interval."""
    return min(max(rate, _MIN_RATE), _MAX_RATE)


def _require_integer(argument: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise FilterParameterError(argument, value, f"{argument} must be an integer")


def validate_rate_parameters(expected_elements: int, error_rate: float) -> None:
    _require_integer("expected_elements", expected_elements)
    if expected_elements < 1:
        raise FilterParameterError(
            "expected_elements", expected_elements, "expected_elements must be > 0"
        )
    if error_rate >= 1 or error_rate <= 0:
        raise FilterParameterError(
            "error_rate", error_rate, "error_rate must be between 0 and 1, exclusive"
        )


def validate_size_parameters(capacity: int, hash_count: int) -> None:
    _require_integer("capacity", capacity)
    _require_integer("hash_count", hash_count)
    if capacity < 1:
        raise FilterParameterError("capacity", capacity, "capacity must be > 0")
    if hash_count < 1:
        raise FilterParameterError("hash_count", hash_count, "hash_count must be > 0")
