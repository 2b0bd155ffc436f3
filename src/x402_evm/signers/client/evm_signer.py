"""
EvmClientSigner - EVM client signer implementation
"""

import logging
from typing import Any

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.middleware import ExtraDataToPOAMiddleware

from x402_evm.abi import ERC20_ABI
from x402_evm.exceptions import PaymentSubmissionError
from x402_evm.signers.client.base import ClientSigner
from x402_evm.utils.address import normalize_evm_address

logger = logging.getLogger(__name__)


class EvmClientSigner(ClientSigner):
    """EVM client signer implementation using web3.py"""

    def __init__(
        self,
        private_key: str,
        rpc_url: str,
        chain_id: int | None = None,
        w3: Any = None,
        check_balance_first: bool = True,
    ) -> None:
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        self._private_key = private_key
        self._address = Account.from_key(private_key).address
        self._rpc_url = rpc_url
        self._chain_id = chain_id
        self._w3 = w3
        self._check_balance_first = check_balance_first
        logger.debug("EvmClientSigner initialized", extra={"address": self._address})

    @classmethod
    def from_private_key(
        cls, private_key: str, rpc_url: str, chain_id: int | None = None
    ) -> "EvmClientSigner":
        """Create signer from private key."""
        return cls(private_key, rpc_url, chain_id)

    def get_address(self) -> str:
        return self._address

    def _ensure_async_web3_client(self) -> Any:
        """Lazy initialize async web3 client."""
        if self._w3 is None:
            w3 = AsyncWeb3(AsyncHTTPProvider(self._rpc_url))
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
            self._w3 = w3
        return self._w3

    async def check_balance(self, token: str) -> int:
        """Check ERC20 token balance"""
        w3 = self._ensure_async_web3_client()
        contract = w3.eth.contract(address=normalize_evm_address(token, "token"), abi=ERC20_ABI)
        return await contract.functions.balanceOf(self._address).call()

    async def transfer_token(self, token: str, receiver: str, amount: int) -> str:
        try:
            token = normalize_evm_address(token, "token")
            receiver = normalize_evm_address(receiver, "receiver")
        except ValueError as e:
            raise PaymentSubmissionError(str(e)) from e
        if amount < 0:
            raise PaymentSubmissionError(f"Transfer amount must not be negative: {amount}")

        w3 = self._ensure_async_web3_client()
        try:
            if self._check_balance_first:
                balance = await self.check_balance(token)
                if balance < amount:
                    raise PaymentSubmissionError(
                        f"Insufficient token balance: have {balance}, need {amount}"
                    )

            contract = w3.eth.contract(address=token, abi=ERC20_ABI)
            chain_id = self._chain_id if self._chain_id is not None else await w3.eth.chain_id
            tx = await contract.functions.transfer(receiver, amount).build_transaction(
                {
                    "from": self._address,
                    "nonce": await w3.eth.get_transaction_count(self._address),
                    "chainId": chain_id,
                }
            )

            signed_tx = w3.eth.account.sign_transaction(tx, private_key=self._private_key)
            tx_hash = await w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except PaymentSubmissionError:
            raise
        except Exception as e:
            logger.error(
                "Token transfer failed: %s",
                e,
                exc_info=True,
                extra={"token": token, "receiver": receiver},
            )
            raise PaymentSubmissionError(f"Token transfer failed: {e}") from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(
            "ERC20 transfer submitted",
            extra={"token": token, "receiver": receiver, "amount": amount, "tx_hash": tx_hash_hex},
        )
        return tx_hash_hex
