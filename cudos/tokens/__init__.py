"""
Cudos Token

Provides:
  - CudosToken      : whitelist-gated ERC-20 token (deployment facade)
  - FungibleLedger  : balances, allowances, fixed supply
  - TransferGate    : whitelist check + one-way "enable for all" switch
"""

from .cudos_token import CudosToken
from .erc20 import (
    ApprovalEvent,
    FungibleLedger,
    TransferEvent,
)
from .gate import TransferGate

__all__ = [
    "CudosToken",
    "FungibleLedger",
    "TransferGate",
    "TransferEvent",
    "ApprovalEvent",
]
