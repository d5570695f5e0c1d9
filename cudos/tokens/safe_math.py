"""
Checked uint256 arithmetic.

Values are plain ints; results outside [0, 2**256 - 1] raise instead of
wrapping.
"""

from ..constants import UINT256_MAX
from ..exceptions import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    InvalidAmountError,
)


def require_uint256(value) -> int:
    """Reject anything that is not an unsigned 256-bit integer."""
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"Amount must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmountError(f"Amount cannot be negative: {value}")
    if value > UINT256_MAX:
        raise InvalidAmountError(f"Amount exceeds uint256: {value}")
    return value


def add(a: int, b: int) -> int:
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError("SafeMath: addition overflow")
    return result


def sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticUnderflowError("SafeMath: subtraction overflow")
    return a - b
