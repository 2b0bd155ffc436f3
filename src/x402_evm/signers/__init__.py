"""
x402 signers module
"""

from x402_evm.signers.client import ClientSigner, EvmClientSigner

__all__ = ["ClientSigner", "EvmClientSigner"]
