"""
Address utility functions for EVM addresses
"""

from eth_utils import is_hex_address, to_checksum_address


def normalize_evm_address(address: str, field_name: str = "address") -> str:
    """Validate an EVM address and return its checksum form

    Args:
        address: Hex address, any case, with or without 0x prefix
        field_name: Name used in the error message

    Returns:
        EIP-55 checksummed address

    Raises:
        ValueError: If the value is empty or not a 20-byte hex address
    """
    value = (address or "").strip()
    if not value:
        raise ValueError(f"{field_name} must not be empty")
    if not value.startswith(("0x", "0X")):
        value = "0x" + value
    value = "0x" + value[2:]
    if not is_hex_address(value):
        raise ValueError(f"{field_name} is not a valid EVM address: {address}")
    return to_checksum_address(value)


def addresses_equal(left: str | None, right: str | None) -> bool:
    """Compare two addresses ignoring checksum casing"""
    if not left or not right:
        return False
    return left.lower() == right.lower()
