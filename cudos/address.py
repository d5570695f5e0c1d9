"""
Cudos Account Addresses

Accounts are identified by Ethereum-style 20-byte addresses. Every address
entering the ledger is normalised to its EIP-55 checksum form so that the
same account always maps to the same key.
"""

from typing import Union

from eth_typing import ChecksumAddress
from eth_utils import (
    is_address,
    is_checksum_address,
    is_checksum_formatted_address,
    to_checksum_address,
)

from .constants import ADDRESS_LENGTH, ZERO_ADDRESS as _ZERO_HEX
from .exceptions import InvalidAccountError, InvalidAddressError


ZERO_ADDRESS: ChecksumAddress = to_checksum_address(_ZERO_HEX)

AddressLike = Union[str, bytes]


def normalize_address(address: AddressLike) -> ChecksumAddress:
    """
    Validate an address and return its checksum form.

    Accepts 0x-prefixed hex strings (any consistent casing, or a valid
    EIP-55 checksum) and raw 20-byte values.

    Raises:
        InvalidAddressError: If the value is not a well-formed address.
    """
    if isinstance(address, bytes) and len(address) == ADDRESS_LENGTH:
        address = "0x" + address.hex()
    if not isinstance(address, str) or not is_address(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    # Mixed case means the caller claims an EIP-55 checksum
    if is_checksum_formatted_address(address) and not is_checksum_address(address):
        raise InvalidAddressError(f"Invalid address checksum: {address!r}")
    return to_checksum_address(address)


def is_zero_address(address: AddressLike) -> bool:
    """Check if address is the null address."""
    return normalize_address(address) == ZERO_ADDRESS


def require_account(address: AddressLike, message: str) -> ChecksumAddress:
    """
    Normalise *address* and reject the null address.

    Args:
        address: Address to check
        message: Error message used when *address* is the null address

    Raises:
        InvalidAddressError: Malformed address.
        InvalidAccountError: Null address.
    """
    account = normalize_address(address)
    if account == ZERO_ADDRESS:
        raise InvalidAccountError(message)
    return account
