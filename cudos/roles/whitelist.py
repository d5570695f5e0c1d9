"""
Whitelist Roles

  - WhitelistAdminRole : self-administered; admins add admins, and leave
                         only by renouncing (no forced removal)
  - WhitelistedRole    : managed; only WhitelistAdmins add or remove members

Both are seeded with the ledger's deployer at genesis.
"""

from ..address import AddressLike
from ..events import EventLog
from ..exceptions import UnauthorizedError
from .roleset import AdminPolicy, RoleKind, RoleRemovedEvent, RoleSet


class WhitelistAdminRole(RoleSet):
    """Accounts allowed to manage the whitelist and open the transfer gate."""

    def __init__(self, log: EventLog):
        super().__init__(RoleKind.WHITELIST_ADMIN, log, AdminPolicy.SELF_SERVICE)

    def remove(self, caller: AddressLike, account: AddressLike) -> RoleRemovedEvent:
        # Admins can never be evicted, only renounce
        raise UnauthorizedError("WhitelistAdminRole: admins can only renounce their own role")


class WhitelistedRole(RoleSet):
    """Accounts allowed to move value while the transfer gate is closed."""

    def __init__(self, log: EventLog, admins: WhitelistAdminRole):
        super().__init__(
            RoleKind.WHITELISTED,
            log,
            AdminPolicy.MANAGER_ONLY,
            manager=admins,
        )
