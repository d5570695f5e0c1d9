"""
CudosToken: whitelist-gated ERC-20 token

Composes the ledger state of one token deployment:

  - WhitelistAdminRole : manages the whitelist, opens the transfer gate
  - WhitelistedRole    : accounts allowed to send while the gate is closed
  - TransferGate       : one-way "transfers enabled for everyone" switch
  - FungibleLedger     : balances, allowances, fixed total supply

All mutating calls take the caller identity first and return the
``Receipt`` committed for the call. A call that raises commits nothing.
"""

from typing import Any, Dict, List

from ..address import AddressLike, require_account
from ..constants import INITIAL_SUPPLY, TOKEN_DECIMALS, TOKEN_NAME, TOKEN_SYMBOL
from ..events import EventLog, Receipt
from ..logger import get_logger
from ..roles import RoleKind, RoleSet, WhitelistAdminRole, WhitelistedRole
from .erc20 import FungibleLedger
from .gate import TransferGate

logger = get_logger(__name__)


class CudosToken:
    """
    Cudos token ledger.

    Mirrors the deployed contract's public surface:
        - name / symbol / decimals / totalSupply
        - balanceOf, allowance
        - transfer, approve, transferFrom, increaseAllowance, decreaseAllowance
        - isWhitelistAdmin, addWhitelistAdmin, renounceWhitelistAdmin
        - isWhitelisted, addWhitelisted, removeWhitelisted, renounceWhitelisted
        - enableTransfersForAll

    The deployer becomes the first WhitelistAdmin, the first Whitelisted
    account and the holder of the entire supply.
    """

    def __init__(self, deployer: AddressLike):
        deployer = require_account(deployer, "CudosToken: deployer is the zero address")

        self._log = EventLog()
        self._admins = WhitelistAdminRole(self._log)
        self._whitelisted = WhitelistedRole(self._log, self._admins)
        self._roles: Dict[RoleKind, RoleSet] = {
            RoleKind.WHITELIST_ADMIN: self._admins,
            RoleKind.WHITELISTED: self._whitelisted,
        }
        self._gate = TransferGate(self._admins, self._whitelisted)

        with self._log.operation() as op:
            self._admins.seed(deployer)
            self._whitelisted.seed(deployer)
            self._ledger = FungibleLedger(self._log, self._gate, INITIAL_SUPPLY, deployer)
        self.deployer = deployer
        self.construction_receipt: Receipt = op.receipt

        logger.info(f"{TOKEN_SYMBOL} deployed by {deployer}, supply={INITIAL_SUPPLY}")

    # ── Metadata ──────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return TOKEN_NAME

    @property
    def symbol(self) -> str:
        return TOKEN_SYMBOL

    @property
    def decimals(self) -> int:
        return TOKEN_DECIMALS

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._ledger.total_supply

    def balance_of(self, account: AddressLike) -> int:
        return self._ledger.balance_of(account)

    def allowance(self, owner: AddressLike, spender: AddressLike) -> int:
        return self._ledger.allowance(owner, spender)

    @property
    def transfers_enabled(self) -> bool:
        return self._gate.transfers_enabled

    def can_transfer(self, account: AddressLike) -> bool:
        return self._gate.can_transfer(account)

    def role(self, kind: RoleKind) -> RoleSet:
        return self._roles[kind]

    def has_role(self, kind: RoleKind, account: AddressLike) -> bool:
        return self._roles[kind].has(account)

    def is_whitelist_admin(self, account: AddressLike) -> bool:
        return self._admins.has(account)

    def is_whitelisted(self, account: AddressLike) -> bool:
        return self._whitelisted.has(account)

    @property
    def events(self) -> List[Any]:
        return self._log.events

    @property
    def receipts(self) -> List[Receipt]:
        return self._log.receipts

    # ── ERC-20 ────────────────────────────────────────────────────────

    def transfer(self, caller: AddressLike, recipient: AddressLike, amount: int) -> Receipt:
        with self._log.operation() as op:
            self._ledger.transfer(caller, recipient, amount)
        return op.receipt

    def approve(self, caller: AddressLike, spender: AddressLike, amount: int) -> Receipt:
        with self._log.operation() as op:
            self._ledger.approve(caller, spender, amount)
        return op.receipt

    def transfer_from(
        self,
        caller: AddressLike,
        sender: AddressLike,
        recipient: AddressLike,
        amount: int,
    ) -> Receipt:
        with self._log.operation() as op:
            self._ledger.transfer_from(caller, sender, recipient, amount)
        return op.receipt

    def increase_allowance(self, caller: AddressLike, spender: AddressLike, added_value: int) -> Receipt:
        with self._log.operation() as op:
            self._ledger.increase_allowance(caller, spender, added_value)
        return op.receipt

    def decrease_allowance(self, caller: AddressLike, spender: AddressLike, subtracted_value: int) -> Receipt:
        with self._log.operation() as op:
            self._ledger.decrease_allowance(caller, spender, subtracted_value)
        return op.receipt

    # ── WhitelistAdmin ────────────────────────────────────────────────

    def add_whitelist_admin(self, caller: AddressLike, account: AddressLike) -> Receipt:
        with self._log.operation() as op:
            self._admins.add(caller, account)
        return op.receipt

    def renounce_whitelist_admin(self, caller: AddressLike) -> Receipt:
        return self.renounce_role(RoleKind.WHITELIST_ADMIN, caller)

    # ── Whitelisted ───────────────────────────────────────────────────

    def add_whitelisted(self, caller: AddressLike, account: AddressLike) -> Receipt:
        with self._log.operation() as op:
            self._whitelisted.add(caller, account)
        return op.receipt

    def remove_whitelisted(self, caller: AddressLike, account: AddressLike) -> Receipt:
        with self._log.operation() as op:
            self._whitelisted.remove(caller, account)
        return op.receipt

    def renounce_whitelisted(self, caller: AddressLike) -> Receipt:
        return self.renounce_role(RoleKind.WHITELISTED, caller)

    def renounce_role(self, kind: RoleKind, caller: AddressLike) -> Receipt:
        with self._log.operation() as op:
            self._roles[kind].renounce(caller)
        return op.receipt

    # ── Transfer gate ─────────────────────────────────────────────────

    def enable_transfers_for_all(self, caller: AddressLike) -> Receipt:
        with self._log.operation() as op:
            self._gate.enable_transfers_for_all(caller)
        return op.receipt

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": str(self.total_supply),
            "deployer": self.deployer,
            "transfersEnabled": self.transfers_enabled,
            "whitelistAdmins": len(self._admins),
            "whitelisted": len(self._whitelisted),
            "holders": self._ledger.holders,
            "lastSeq": self._log.last_seq,
        }

    def __repr__(self) -> str:
        return f"<CudosToken {self.symbol} supply={self.total_supply}>"
