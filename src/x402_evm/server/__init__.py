"""
x402 server module
"""

from x402_evm.server.replay import SpentTransactionStore
from x402_evm.server.x402_server import AccessPolicy, X402Server

__all__ = ["AccessPolicy", "SpentTransactionStore", "X402Server"]
