"""
Cudos Exceptions

Every failure of a ledger operation is one of the classes below. An
operation that raises has made no state change and committed no events.
"""


class CudosException(Exception):
    """Base exception for the Cudos ledger."""
    pass


class ConfigurationError(CudosException):
    """Configuration error."""
    pass


# ── Accounts & amounts ────────────────────────────────────────────────

class InvalidAddressError(CudosException):
    """Value is not a well-formed 20-byte address."""
    pass


class InvalidAccountError(CudosException):
    """The null address was used where a real account is required."""
    pass


class InvalidAmountError(CudosException):
    """Amount is not an unsigned 256-bit integer."""
    pass


# ── Roles ─────────────────────────────────────────────────────────────

class UnauthorizedError(CudosException):
    """Caller lacks the role required by an admin-gated mutation."""
    pass


class RoleMembershipError(CudosException):
    """Role-set precondition violated."""
    pass


class AlreadyMemberError(RoleMembershipError):
    """Account already has the role."""
    pass


class NotMemberError(RoleMembershipError):
    """Account does not have the role."""
    pass


# ── Ledger ────────────────────────────────────────────────────────────

class GateClosedError(CudosException):
    """Sender is neither whitelisted nor covered by the open gate."""
    pass


class InsufficientBalanceError(CudosException):
    """Sender balance is too low."""
    pass


class InsufficientAllowanceError(CudosException):
    """Spender allowance is too low."""
    pass


class ArithmeticOverflowError(CudosException):
    """uint256 addition overflowed."""
    pass


class ArithmeticUnderflowError(CudosException):
    """uint256 subtraction underflowed."""
    pass
