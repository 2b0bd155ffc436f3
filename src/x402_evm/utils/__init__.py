"""
x402 utility functions
"""

from x402_evm.utils.address import addresses_equal, normalize_evm_address
from x402_evm.utils.units import from_base_units, parse_amount, to_base_units

__all__ = [
    "addresses_equal",
    "normalize_evm_address",
    "from_base_units",
    "parse_amount",
    "to_base_units",
]
