"""
Account address handling.

Stakers, the admin and the ledger itself are identified by 20-byte hex
addresses. Every address entering the ledger or the token is normalized to its
EIP-55 checksum form so that mixed-case spellings map to the same position.
"""

from eth_utils import is_address, to_checksum_address

from .exceptions import InvalidAddressError


def normalize_address(address: str) -> str:
    """
    Return the checksum form of *address*.

    Raises:
        InvalidAddressError: if *address* is not a 20-byte hex address
    """
    if not isinstance(address, str) or not is_address(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


def is_valid_address(address: str) -> bool:
    return isinstance(address, str) and is_address(address)
