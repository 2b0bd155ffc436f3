"""
Client signers
"""

from x402_evm.signers.client.base import ClientSigner
from x402_evm.signers.client.evm_signer import EvmClientSigner

__all__ = ["ClientSigner", "EvmClientSigner"]
