"""
Cudos Access Control

Provides:
  - RoleKind / AdminPolicy / RoleSet           (roleset.py)
  - WhitelistAdminRole / WhitelistedRole        (whitelist.py)
"""

from .roleset import (
    AdminPolicy,
    RoleAddedEvent,
    RoleKind,
    RoleRemovedEvent,
    RoleSet,
)
from .whitelist import (
    WhitelistAdminRole,
    WhitelistedRole,
)

__all__ = [
    "AdminPolicy",
    "RoleAddedEvent",
    "RoleKind",
    "RoleRemovedEvent",
    "RoleSet",
    "WhitelistAdminRole",
    "WhitelistedRole",
]
