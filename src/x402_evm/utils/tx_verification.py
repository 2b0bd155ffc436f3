"""
Transaction Verification Utilities

Decides whether a submitted transaction settled the configured payment by
reading its receipt logs. The verifier only reads chain state and writes no
shared state, so repeated calls for the same hash agree.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from x402_evm.exceptions import (
    ChainLookupError,
    ClientInputError,
    InsufficientPaymentError,
    InternalError,
    PendingError,
    RevertedError,
    X402Error,
)
from x402_evm.utils.address import addresses_equal
from x402_evm.utils.transfer_logs import LogEntry, TransferEvent, decode_transfer_log
from x402_evm.utils.units import from_base_units

if TYPE_CHECKING:
    from x402_evm.config import GateConfig

__all__ = [
    "ChainClient",
    "ChainReceipt",
    "ChainTransaction",
    "LogEntry",
    "PaymentVerifier",
    "ReceiptStatus",
    "TransferEvent",
    "VerificationResult",
    "validate_tx_hash",
]

TX_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def validate_tx_hash(tx_hash: Any) -> str:
    """Return the hash if it is a 0x-prefixed 32-byte hex string

    Raises:
        ClientInputError: If the hash is missing, empty or malformed
    """
    if not isinstance(tx_hash, str) or not tx_hash.strip():
        raise ClientInputError("Missing txHash in request body")
    tx_hash = tx_hash.strip()
    if not TX_HASH_PATTERN.match(tx_hash):
        raise ClientInputError(f"Invalid txHash: {tx_hash}")
    return tx_hash


@dataclass
class ChainTransaction:
    """Transaction as known to the chain"""

    tx_hash: str
    block_number: int | None = None

    @property
    def pending(self) -> bool:
        return self.block_number is None


class ReceiptStatus(str, Enum):
    SUCCESS = "success"
    REVERTED = "reverted"


@dataclass
class ChainReceipt:
    """Receipt of a mined transaction"""

    tx_hash: str
    status: ReceiptStatus
    logs: list[LogEntry] = field(default_factory=list)
    block_number: int | None = None


@dataclass
class VerificationResult:
    """Result of payment verification"""

    granted: bool
    tx_hash: str
    amount_paid: int
    required_amount: int
    reason: str | None = None
    block_number: int | None = None
    transfers: list[TransferEvent] = field(default_factory=list)


class ChainClient(Protocol):
    """Read access to a single EVM chain"""

    async def get_transaction(self, tx_hash: str) -> ChainTransaction | None:
        """Return the transaction, or None if the hash is unknown"""
        ...

    async def get_transaction_receipt(self, tx_hash: str) -> ChainReceipt | None:
        """Return the receipt, or None while the transaction is pending"""
        ...

    async def wait_for_transaction_receipt(
        self,
        tx_hash: str,
        timeout: float = 120.0,
        poll_latency: float = 1.0,
    ) -> ChainReceipt:
        """Poll until the receipt exists; raise TransactionTimeoutError after timeout"""
        ...


class PaymentVerifier:
    """Verifies that a transaction paid the configured receiver enough tokens"""

    def __init__(self, chain: ChainClient, config: "GateConfig") -> None:
        self._chain = chain
        self._config = config
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def config(self) -> "GateConfig":
        return self._config

    async def verify(self, tx_hash: str) -> VerificationResult:
        """
        Verify a transaction settled the payment.

        Checks, in order:
        1. Transaction exists
        2. Receipt exists (transaction mined)
        3. Receipt status is success
        4. Sum of Transfer values from the configured token to the receiver
           covers the required amount

        Args:
            tx_hash: Transaction hash to verify

        Returns:
            VerificationResult with granted=True

        Raises:
            ChainLookupError: Hash unknown to the chain
            PendingError: No receipt yet
            RevertedError: Transaction reverted
            InsufficientPaymentError: Amount paid below requirement
            InternalError: Chain client failed unexpectedly
        """
        config = self._config
        required = config.required_units

        self._logger.info("=" * 60)
        self._logger.info(f"Verifying payment transaction: {tx_hash}")
        self._logger.info(
            "[EXPECTED] Payment: → %s | %s %s (%s base units) token=%s",
            config.receiver_address,
            config.amount_display,
            config.token_symbol,
            required,
            config.token_address,
        )

        receipt = await self._fetch_receipt(tx_hash)

        if receipt.status != ReceiptStatus.SUCCESS:
            self._logger.error(f"[FAILED] Transaction reverted on-chain: {tx_hash}")
            self._logger.info("=" * 60)
            raise RevertedError(tx_hash)

        transfers = self._collect_transfers(receipt.logs)
        to_receiver = [
            event for event in transfers if addresses_equal(event.to_addr, config.receiver_address)
        ]
        amount_paid = sum(event.value for event in to_receiver)

        for event in transfers:
            self._logger.info(
                "[ACTUAL] Transfer: %s → %s | %s %s",
                event.from_addr,
                event.to_addr,
                event.value,
                event.token,
            )
        self._logger.info(
            "[COMPARE] Paid to receiver: %s, required: %s (%d transfer(s) matched)",
            amount_paid,
            required,
            len(to_receiver),
        )

        if amount_paid < required:
            self._logger.error(f"[FAILED] Insufficient payment in {tx_hash}")
            self._logger.info("=" * 60)
            raise InsufficientPaymentError(
                amount_paid=amount_paid,
                required_amount=required,
                amount_paid_display=from_base_units(amount_paid, config.decimals),
                required_amount_display=config.amount_display,
                currency=config.token_symbol,
            )

        self._logger.info(f"[SUCCESS] Payment verification passed: {tx_hash}")
        self._logger.info("=" * 60)
        return VerificationResult(
            granted=True,
            tx_hash=tx_hash,
            amount_paid=amount_paid,
            required_amount=required,
            block_number=receipt.block_number,
            transfers=to_receiver,
        )

    async def _fetch_receipt(self, tx_hash: str) -> ChainReceipt:
        try:
            tx = await self._chain.get_transaction(tx_hash)
            if tx is None:
                self._logger.warning(f"[FAILED] Transaction not found: {tx_hash}")
                raise ChainLookupError(tx_hash, self._config.network)
            if tx.pending:
                self._logger.info(f"Transaction pending: {tx_hash}")
                raise PendingError(tx_hash)

            receipt = await self._chain.get_transaction_receipt(tx_hash)
            if receipt is None:
                self._logger.info(f"Transaction pending: {tx_hash}")
                raise PendingError(tx_hash)
            return receipt
        except X402Error:
            raise
        except Exception as e:
            self._logger.error(f"Transaction lookup error: {e}", exc_info=True)
            raise InternalError(f"Chain lookup failed for {tx_hash}: {e}") from e

    def _collect_transfers(self, logs: list[LogEntry]) -> list[TransferEvent]:
        """Decode Transfer events emitted by the configured token, in log order."""
        transfers: list[TransferEvent] = []
        for index, log in enumerate(logs):
            if not addresses_equal(log.address, self._config.token_address):
                continue
            try:
                transfers.append(decode_transfer_log(log))
            except ValueError as e:
                self._logger.debug(f"Skipping log #{index} from token contract: {e}")
        return transfers
