"""
EvmChainClient - chain reads over AsyncWeb3
"""

import logging
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, TransactionNotFound
from web3.middleware import ExtraDataToPOAMiddleware

from x402_evm.exceptions import TransactionTimeoutError
from x402_evm.utils.transfer_logs import log_entry_from_web3
from x402_evm.utils.tx_verification import ChainReceipt, ChainTransaction, ReceiptStatus

logger = logging.getLogger(__name__)


def _receipt_from_web3(tx_hash: str, receipt: Any) -> ChainReceipt:
    status = ReceiptStatus.SUCCESS if receipt["status"] == 1 else ReceiptStatus.REVERTED
    return ChainReceipt(
        tx_hash=tx_hash,
        status=status,
        logs=[log_entry_from_web3(raw_log) for raw_log in receipt["logs"]],
        block_number=receipt.get("blockNumber"),
    )


class EvmChainClient:
    """Chain client backed by a JSON-RPC endpoint"""

    def __init__(self, rpc_url: str, w3: AsyncWeb3 | None = None) -> None:
        self._rpc_url = rpc_url
        self._w3 = w3

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    def _ensure_async_web3_client(self) -> AsyncWeb3:
        """Lazy initialize the async web3 client."""
        if self._w3 is None:
            w3 = AsyncWeb3(AsyncHTTPProvider(self._rpc_url))
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
            self._w3 = w3
            logger.debug("AsyncWeb3 client created for %s", self._rpc_url)
        return self._w3

    async def get_chain_id(self) -> int:
        w3 = self._ensure_async_web3_client()
        return await w3.eth.chain_id

    async def get_transaction(self, tx_hash: str) -> ChainTransaction | None:
        w3 = self._ensure_async_web3_client()
        try:
            tx = await w3.eth.get_transaction(tx_hash)
        except TransactionNotFound:
            return None
        return ChainTransaction(
            tx_hash=Web3.to_hex(tx["hash"]),
            block_number=tx.get("blockNumber"),
        )

    async def get_transaction_receipt(self, tx_hash: str) -> ChainReceipt | None:
        w3 = self._ensure_async_web3_client()
        try:
            receipt = await w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        return _receipt_from_web3(tx_hash, receipt)

    async def wait_for_transaction_receipt(
        self,
        tx_hash: str,
        timeout: float = 120.0,
        poll_latency: float = 1.0,
    ) -> ChainReceipt:
        """Wait for EVM transaction confirmation"""
        w3 = self._ensure_async_web3_client()
        try:
            receipt = await w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=timeout, poll_latency=poll_latency
            )
        except TimeExhausted as e:
            raise TransactionTimeoutError(tx_hash, timeout) from e
        return _receipt_from_web3(tx_hash, receipt)
