"""
Transfer Gate

Value may only leave an account whose owner is whitelisted, until a
WhitelistAdmin opens the gate for everyone. Opening is one-way: once
``transfers_enabled`` is True it stays True.
"""

from typing import Any, Dict

from ..address import AddressLike
from ..exceptions import GateClosedError, UnauthorizedError
from ..logger import get_logger
from ..roles import WhitelistAdminRole, WhitelistedRole

logger = get_logger(__name__)


class TransferGate:
    """
    Decides whether an account may currently send value.

        can_transfer(a) = transfers_enabled or a is whitelisted
    """

    def __init__(self, admins: WhitelistAdminRole, whitelisted: WhitelistedRole):
        self._admins = admins
        self._whitelisted = whitelisted
        self._transfers_enabled = False

    @property
    def transfers_enabled(self) -> bool:
        return self._transfers_enabled

    def can_transfer(self, account: AddressLike) -> bool:
        return self._transfers_enabled or self._whitelisted.has(account)

    def require_can_transfer(self, account: AddressLike) -> None:
        if not self.can_transfer(account):
            raise GateClosedError("Caller can not currently transfer")

    def enable_transfers_for_all(self, caller: AddressLike) -> bool:
        """
        Open the gate for every account.

        Repeating the call after the gate is open is allowed and changes
        nothing, but the caller is still checked every time.

        Returns:
            True if this call opened the gate, False if it was already open.
        """
        if not self._admins.has(caller):
            raise UnauthorizedError(
                "WhitelistAdminRole: caller does not have the WhitelistAdmin role"
            )
        if self._transfers_enabled:
            return False

        self._transfers_enabled = True
        logger.warning(f"Transfers enabled for all accounts by {caller}")
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"transfersEnabled": self._transfers_enabled}

    def __repr__(self) -> str:
        state = "open" if self._transfers_enabled else "whitelist-only"
        return f"<TransferGate {state}>"
