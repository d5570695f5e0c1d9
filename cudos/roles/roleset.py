"""
Role Sets

A ``RoleSet`` is a named membership set of accounts with an admin policy
deciding who may add or remove members:

  - SELF_SERVICE : any current member may manage membership
  - MANAGER_ONLY : only members of a separate manager ``RoleSet`` may

Any member may always renounce its own membership, whatever the policy.
The null address is never a member, and querying it is an error.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Set

from eth_typing import ChecksumAddress

from ..address import AddressLike, require_account
from ..events import EventLog
from ..exceptions import AlreadyMemberError, NotMemberError, UnauthorizedError
from ..logger import get_logger

logger = get_logger(__name__)

ZERO_ACCOUNT_MESSAGE = "Roles: account is the zero address"


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class RoleKind(Enum):
    """Roles known to the ledger."""
    WHITELIST_ADMIN = "WhitelistAdmin"
    WHITELISTED = "Whitelisted"


class AdminPolicy(Enum):
    """Who may add and remove members of a role."""
    SELF_SERVICE = "self-service"
    MANAGER_ONLY = "manager-only"


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RoleAddedEvent:
    """Emitted when an account gains a role."""
    role: RoleKind
    account: str

    @property
    def name(self) -> str:
        return f"{self.role.value}Added"

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "account": self.account}


@dataclass(frozen=True)
class RoleRemovedEvent:
    """Emitted when an account loses a role (removal or renouncement)."""
    role: RoleKind
    account: str

    @property
    def name(self) -> str:
        return f"{self.role.value}Removed"

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "account": self.account}


# ══════════════════════════════════════════════════════════════════════
#  ROLE SET
# ══════════════════════════════════════════════════════════════════════

class RoleSet:
    """
    Membership set for one role.

    Args:
        kind: Which role this set backs
        log: Event log that receives RoleAdded / RoleRemoved events
        policy: Admin policy for add/remove
        manager: Role whose members administer this one (MANAGER_ONLY only)
        unauthorized_message: Error text when the admin check fails
    """

    def __init__(
        self,
        kind: RoleKind,
        log: EventLog,
        policy: AdminPolicy = AdminPolicy.SELF_SERVICE,
        manager: Optional["RoleSet"] = None,
        unauthorized_message: Optional[str] = None,
    ):
        if policy is AdminPolicy.MANAGER_ONLY and manager is None:
            raise ValueError(f"{kind.value}: manager-only role needs a manager role")
        if policy is AdminPolicy.SELF_SERVICE and manager is not None:
            raise ValueError(f"{kind.value}: self-service role cannot have a manager role")

        self.kind = kind
        self.policy = policy
        self.manager = manager
        self._log = log
        self._members: Set[ChecksumAddress] = set()

        admin_kind = manager.kind if manager is not None else kind
        self._unauthorized_message = unauthorized_message or (
            f"{kind.value}Role: caller does not have the {admin_kind.value} role"
        )

    # ── Queries ───────────────────────────────────────────────────────

    def has(self, account: AddressLike) -> bool:
        return require_account(account, ZERO_ACCOUNT_MESSAGE) in self._members

    @property
    def members(self) -> FrozenSet[ChecksumAddress]:
        return frozenset(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, account: AddressLike) -> bool:
        return self.has(account)

    # ── Admin policy ──────────────────────────────────────────────────

    def is_admin(self, caller: AddressLike) -> bool:
        """Whether *caller* may add/remove members of this role."""
        if self.policy is AdminPolicy.MANAGER_ONLY:
            return self.manager.has(caller)
        return self.has(caller)

    def require_admin(self, caller: AddressLike) -> None:
        if not self.is_admin(caller):
            raise UnauthorizedError(self._unauthorized_message)

    # ── Mutations ─────────────────────────────────────────────────────

    def add(self, caller: AddressLike, account: AddressLike) -> RoleAddedEvent:
        """Grant the role to *account*; *caller* must satisfy the admin policy."""
        self.require_admin(caller)
        return self._add(account)

    def remove(self, caller: AddressLike, account: AddressLike) -> RoleRemovedEvent:
        """Revoke the role from *account*; *caller* must satisfy the admin policy."""
        self.require_admin(caller)
        return self._remove(account)

    def renounce(self, caller: AddressLike) -> RoleRemovedEvent:
        """Give up the role. Needs no admin rights, only current membership."""
        return self._remove(caller)

    def seed(self, account: AddressLike) -> RoleAddedEvent:
        """Grant the role without an admin check. Used at genesis only."""
        return self._add(account)

    def _add(self, account: AddressLike) -> RoleAddedEvent:
        member = require_account(account, ZERO_ACCOUNT_MESSAGE)
        if member in self._members:
            raise AlreadyMemberError("Roles: account already has role")

        with self._log.operation():
            self._members.add(member)
            event = RoleAddedEvent(role=self.kind, account=member)
            self._log.emit(event)
        logger.info(f"[{self.kind.value}] {event.name}: {member}")
        return event

    def _remove(self, account: AddressLike) -> RoleRemovedEvent:
        member = require_account(account, ZERO_ACCOUNT_MESSAGE)
        if member not in self._members:
            raise NotMemberError("Roles: account does not have role")

        with self._log.operation():
            self._members.discard(member)
            event = RoleRemovedEvent(role=self.kind, account=member)
            self._log.emit(event)
        logger.info(f"[{self.kind.value}] {event.name}: {member}")
        return event

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.kind.value,
            "policy": self.policy.value,
            "manager": self.manager.kind.value if self.manager is not None else None,
            "members": sorted(self._members),
        }

    def __repr__(self) -> str:
        return f"<RoleSet {self.kind.value} members={len(self._members)}>"
