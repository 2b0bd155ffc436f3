"""
X402Server - Resource gate and payment verification for a single resource
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from x402_evm.config import GateConfig
from x402_evm.exceptions import TransactionAlreadyUsedError
from x402_evm.server.replay import SpentTransactionStore
from x402_evm.types import PaymentDetails, PaymentRequired, VerifyResponse
from x402_evm.utils.evm_client import EvmChainClient
from x402_evm.utils.tx_verification import ChainClient, PaymentVerifier, validate_tx_hash

logger = logging.getLogger(__name__)

# Returns True when the caller may read the resource without paying
AccessPolicy = Callable[[Any], Union[bool, Awaitable[bool]]]


class X402Server:
    """
    Gate one resource behind an ERC-20 payment.

    The challenge and the verifier are built from the same GateConfig, so the
    client is asked for exactly what the verifier later checks.
    """

    def __init__(
        self,
        config: GateConfig,
        chain: ChainClient | None = None,
        access_policy: AccessPolicy | None = None,
        spent_store: SpentTransactionStore | None = None,
    ) -> None:
        """
        Initialize X402Server.

        Args:
            config: Gate configuration
            chain: Chain client; defaults to an EvmChainClient on config.rpc_url
            access_policy: Optional check that lets a request through unpaid
            spent_store: Store of redeemed hashes; created when
                config.single_use_tx is set and none is given
        """
        self._config = config
        self._chain = chain if chain is not None else EvmChainClient(config.rpc_url)
        self._verifier = PaymentVerifier(self._chain, config)
        self._access_policy = access_policy
        if spent_store is None and config.single_use_tx:
            spent_store = SpentTransactionStore()
        self._spent_store = spent_store

    @property
    def config(self) -> GateConfig:
        return self._config

    @property
    def verifier(self) -> PaymentVerifier:
        return self._verifier

    @property
    def spent_store(self) -> SpentTransactionStore | None:
        return self._spent_store

    def create_payment_required_response(self) -> PaymentRequired:
        """Build the 402 challenge from the gate configuration"""
        config = self._config
        instruction = (
            f"Send {config.amount_display} {config.token_symbol} "
            f"({config.token_address}) to {config.receiver_address} on {config.network}."
        )
        return PaymentRequired(
            paymentDetails=PaymentDetails(
                receiver=config.receiver_address,
                amount=config.amount_display,
                currency=config.token_symbol,
                tokenAddress=config.token_address,
                decimals=config.decimals,
                chainId=config.chain_id,
                network=config.network,
                instruction=instruction,
            ),
        )

    def build_resource_payload(self, tx_hash: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": self._config.resource_message,
            "access": "granted",
        }
        if tx_hash is not None:
            payload["txHash"] = tx_hash
        return payload

    async def request_resource(self, request: Any = None) -> PaymentRequired | dict[str, Any]:
        """
        Return the resource payload if the access policy allows it,
        otherwise the payment challenge.
        """
        if self._access_policy is not None:
            allowed = self._access_policy(request)
            if inspect.isawaitable(allowed):
                allowed = await allowed
            if allowed:
                logger.info("Access policy granted resource without payment")
                return self.build_resource_payload()
        return self.create_payment_required_response()

    async def verify_payment(self, tx_hash: Any) -> VerifyResponse:
        """
        Verify a payment proof and grant access.

        Raises:
            ClientInputError: Missing or malformed hash
            TransactionAlreadyUsedError: Hash already redeemed (single-use mode)
            VerificationError: Settlement could not be established
            InternalError: Chain access failed
        """
        tx_hash = validate_tx_hash(tx_hash)
        store = self._spent_store
        if store is not None and tx_hash in store:
            logger.warning(f"Rejected reused transaction: {tx_hash}")
            raise TransactionAlreadyUsedError(tx_hash)

        result = await self._verifier.verify(tx_hash)

        if store is not None and not store.claim(tx_hash):
            logger.warning(f"Transaction redeemed concurrently: {tx_hash}")
            raise TransactionAlreadyUsedError(tx_hash)

        logger.info(f"Access granted for {tx_hash} (paid {result.amount_paid} base units)")
        return VerifyResponse(message=self._config.resource_message, txHash=result.tx_hash)
