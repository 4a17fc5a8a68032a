"""
Checked uint256 arithmetic.

Block heights, timestamps and vote tallies are unsigned 256-bit integers on
chain. These helpers raise instead of wrapping.
"""

from .constants import UINT256_MAX
from .exceptions import ArithmeticOverflowError


def require_uint256(value: int, name: str = "value") -> int:
    """Validate that *value* is an int in [0, 2**256 - 1]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflowError(f"{name} out of uint256 range: {value}")
    return value


def add256(a: int, b: int) -> int:
    c = a + b
    if c > UINT256_MAX:
        raise ArithmeticOverflowError("addition overflow")
    return c


def sub256(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticOverflowError("subtraction underflow")
    return a - b
