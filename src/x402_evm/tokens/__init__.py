"""
Token registry
"""

from x402_evm.tokens.registry import TokenInfo, TokenRegistry

__all__ = ["TokenInfo", "TokenRegistry"]
