"""
Fungible Ledger: ERC-20 balances and allowances

Implements the value-moving half of the token:
  - balanceOf / allowance / totalSupply views
  - transfer, approve, transferFrom
  - increaseAllowance / decreaseAllowance

Every operation that moves value first asks the ``TransferGate`` whether
the account the value leaves may currently send. Each call either fully
commits (state + events) or raises before touching anything.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from eth_typing import ChecksumAddress

from ..address import ZERO_ADDRESS, AddressLike, normalize_address, require_account
from ..events import EventLog
from ..logger import get_logger
from ..exceptions import InsufficientAllowanceError, InsufficientBalanceError
from . import safe_math
from .gate import TransferGate

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on genesis issuance and every successful transfer."""
    sender: str
    recipient: str
    value: int

    name = "Transfer"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "from": self.sender,
            "to": self.recipient,
            "value": str(self.value),
        }


@dataclass(frozen=True)
class ApprovalEvent:
    """Emitted on every approve / increaseAllowance / decreaseAllowance."""
    owner: str
    spender: str
    value: int

    name = "Approval"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "owner": self.owner,
            "spender": self.spender,
            "value": str(self.value),
        }


# ══════════════════════════════════════════════════════════════════════
#  LEDGER
# ══════════════════════════════════════════════════════════════════════

class FungibleLedger:
    """
    Balances, allowances and a supply fixed at genesis.

    The whole supply is issued to *holder* on construction, emitted as a
    Transfer from the null address. There is no other mint or burn path, so
    the sum of all balances always equals ``total_supply``.
    """

    def __init__(
        self,
        log: EventLog,
        gate: TransferGate,
        total_supply: int,
        holder: AddressLike,
    ):
        holder = require_account(holder, "ERC20: mint to the zero address")
        safe_math.require_uint256(total_supply)

        self._log = log
        self._gate = gate
        self._total_supply = total_supply
        self._balances: Dict[ChecksumAddress, int] = {}
        self._allowances: Dict[Tuple[ChecksumAddress, ChecksumAddress], int] = {}  # (owner, spender)

        with self._log.operation():
            self._balances[holder] = total_supply
            self._log.emit(TransferEvent(sender=ZERO_ADDRESS, recipient=holder, value=total_supply))
        logger.info(f"Genesis issuance: {total_supply} → {holder}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: AddressLike) -> int:
        return self._balances.get(normalize_address(account), 0)

    def allowance(self, owner: AddressLike, spender: AddressLike) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    @property
    def holders(self) -> int:
        return len([b for b in self._balances.values() if b > 0])

    # ── Core ERC-20 operations ────────────────────────────────────────

    def transfer(self, sender: AddressLike, recipient: AddressLike, amount: int) -> TransferEvent:
        """
        Move *amount* from *sender* to *recipient*.

        Raises:
            GateClosedError: sender may not currently transfer
            InvalidAccountError: recipient is the null address
            InsufficientBalanceError: sender balance below amount
        """
        sender = require_account(sender, "ERC20: transfer from the zero address")
        recipient = normalize_address(recipient)
        safe_math.require_uint256(amount)

        self._gate.require_can_transfer(sender)
        event = self._move(sender, recipient, amount)
        logger.debug(f"Transfer: {sender} → {recipient} {amount}")
        return event

    def approve(self, owner: AddressLike, spender: AddressLike, amount: int) -> ApprovalEvent:
        """Set the allowance of *spender* over *owner*'s balance to exactly *amount*."""
        owner = require_account(owner, "ERC20: approve from the zero address")
        spender = require_account(spender, "ERC20: approve to the zero address")
        safe_math.require_uint256(amount)

        return self._approve(owner, spender, amount)

    def transfer_from(
        self,
        spender: AddressLike,
        sender: AddressLike,
        recipient: AddressLike,
        amount: int,
    ) -> TransferEvent:
        """
        Move *amount* from *sender* to *recipient* on behalf of *spender*.

        The gate is checked against *sender*, the account the value leaves,
        not against the spender. The allowance decrement emits no event of
        its own.
        """
        spender = require_account(spender, "ERC20: transfer by the zero address")
        sender = require_account(sender, "ERC20: transfer from the zero address")
        recipient = normalize_address(recipient)
        safe_math.require_uint256(amount)

        self._gate.require_can_transfer(sender)
        self._require_recipient(recipient)

        allowed = self._allowances.get((sender, spender), 0)
        if allowed < amount:
            raise InsufficientAllowanceError(
                f"Allowance {allowed} < transfer amount {amount}"
            )

        with self._log.operation():
            event = self._move(sender, recipient, amount)
            self._allowances[(sender, spender)] = safe_math.sub(allowed, amount)
        logger.debug(f"transferFrom: spender={spender} {sender} → {recipient} {amount}")
        return event

    def increase_allowance(self, owner: AddressLike, spender: AddressLike, added_value: int) -> ApprovalEvent:
        owner = require_account(owner, "ERC20: approve from the zero address")
        spender = require_account(spender, "ERC20: approve to the zero address")
        safe_math.require_uint256(added_value)

        current = self._allowances.get((owner, spender), 0)
        return self._approve(owner, spender, safe_math.add(current, added_value))

    def decrease_allowance(self, owner: AddressLike, spender: AddressLike, subtracted_value: int) -> ApprovalEvent:
        owner = require_account(owner, "ERC20: approve from the zero address")
        spender = require_account(spender, "ERC20: approve to the zero address")
        safe_math.require_uint256(subtracted_value)

        current = self._allowances.get((owner, spender), 0)
        return self._approve(owner, spender, safe_math.sub(current, subtracted_value))

    # ── Internals ─────────────────────────────────────────────────────

    @staticmethod
    def _require_recipient(recipient: ChecksumAddress) -> None:
        require_account(recipient, "ERC20: transfer to the zero address")

    def _move(self, sender: ChecksumAddress, recipient: ChecksumAddress, amount: int) -> TransferEvent:
        self._require_recipient(recipient)

        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {balance} < transfer amount {amount}"
            )

        # Self-transfers must read the recipient balance after the debit
        debited = balance - amount
        credited = safe_math.add(
            debited if recipient == sender else self._balances.get(recipient, 0),
            amount,
        )

        event = TransferEvent(sender=sender, recipient=recipient, value=amount)
        with self._log.operation():
            self._balances[sender] = debited
            self._balances[recipient] = credited
            self._log.emit(event)
        return event

    def _approve(self, owner: ChecksumAddress, spender: ChecksumAddress, amount: int) -> ApprovalEvent:
        event = ApprovalEvent(owner=owner, spender=spender, value=amount)
        with self._log.operation():
            self._allowances[(owner, spender)] = amount
            self._log.emit(event)
        logger.debug(f"Approve: {owner} → {spender} allowance={amount}")
        return event

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSupply": str(self._total_supply),
            "holders": self.holders,
        }

    def __repr__(self) -> str:
        return f"<FungibleLedger supply={self._total_supply} holders={self.holders}>"
