"""
Cudos: whitelist-gated ERC-20 token ledger.
"""

__version__ = "1.0.0"

from .address import ZERO_ADDRESS
from .events import EventLog, Receipt
from .roles import RoleKind
from .tokens import CudosToken

__all__ = [
    "CudosToken",
    "EventLog",
    "Receipt",
    "RoleKind",
    "ZERO_ADDRESS",
]
