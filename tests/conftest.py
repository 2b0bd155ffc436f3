"""
Pytest configuration and shared fixtures
"""

import pytest
from eth_utils import to_checksum_address

from x402_evm.abi import TRANSFER_EVENT_TOPIC
from x402_evm.config import GateConfig
from x402_evm.exceptions import PaymentSubmissionError, TransactionTimeoutError
from x402_evm.signers.client.base import ClientSigner
from x402_evm.utils.tx_verification import (
    ChainReceipt,
    ChainTransaction,
    LogEntry,
    ReceiptStatus,
)

TOKEN_ADDRESS = to_checksum_address("0x83bde9df64af5e475db44ba21c1df25e19a0cf9a")
RECEIVER_ADDRESS = to_checksum_address("0xfcad0b19bb29d4674531d6f115237e16afce377c")
PAYER_ADDRESS = "0x1111111111111111111111111111111111111111"
OTHER_ADDRESS = "0x2222222222222222222222222222222222222222"
TX_HASH = "0x" + "ab" * 32


def make_transfer_log(token: str, from_addr: str, to_addr: str, value: int) -> LogEntry:
    """Build a raw Transfer log the way a node returns it"""

    def topic(address: str) -> bytes:
        return b"\x00" * 12 + bytes.fromhex(address[2:])

    return LogEntry(
        address=token,
        topics=[TRANSFER_EVENT_TOPIC, topic(from_addr), topic(to_addr)],
        data=value.to_bytes(32, "big"),
    )


class FakeChainClient:
    """In-memory chain with call counters"""

    def __init__(self) -> None:
        self.transactions: dict[str, ChainTransaction] = {}
        self.receipts: dict[str, ChainReceipt] = {}
        self.calls: list[str] = []
        self.error: Exception | None = None
        self.wait_calls: list[tuple[str, float, float]] = []

    def add_mined(
        self,
        tx_hash: str,
        logs: list[LogEntry],
        status: ReceiptStatus = ReceiptStatus.SUCCESS,
    ) -> None:
        self.transactions[tx_hash] = ChainTransaction(tx_hash=tx_hash, block_number=100)
        self.receipts[tx_hash] = ChainReceipt(
            tx_hash=tx_hash, status=status, logs=logs, block_number=100
        )

    def add_pending(self, tx_hash: str) -> None:
        self.transactions[tx_hash] = ChainTransaction(tx_hash=tx_hash)

    async def get_transaction(self, tx_hash: str) -> ChainTransaction | None:
        self.calls.append("get_transaction")
        if self.error is not None:
            raise self.error
        return self.transactions.get(tx_hash)

    async def get_transaction_receipt(self, tx_hash: str) -> ChainReceipt | None:
        self.calls.append("get_transaction_receipt")
        if self.error is not None:
            raise self.error
        return self.receipts.get(tx_hash)

    async def wait_for_transaction_receipt(
        self, tx_hash: str, timeout: float = 120.0, poll_latency: float = 1.0
    ) -> ChainReceipt:
        self.wait_calls.append((tx_hash, timeout, poll_latency))
        receipt = self.receipts.get(tx_hash)
        if receipt is None:
            raise TransactionTimeoutError(tx_hash, timeout)
        return receipt


class FakeSigner(ClientSigner):
    """Signer that 'mines' its transfer on a FakeChainClient"""

    def __init__(
        self,
        chain: FakeChainClient,
        address: str = PAYER_ADDRESS,
        tx_hash: str = TX_HASH,
        mine: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.chain = chain
        self.address = address
        self.tx_hash = tx_hash
        self.mine = mine
        self.error = error
        self.transfers: list[tuple[str, str, int]] = []

    def get_address(self) -> str:
        return self.address

    async def check_balance(self, token: str) -> int:
        return 10**18

    async def transfer_token(self, token: str, receiver: str, amount: int) -> str:
        if self.error is not None:
            raise self.error
        self.transfers.append((token, receiver, amount))
        if self.mine:
            self.chain.add_mined(
                self.tx_hash, [make_transfer_log(token, self.address, receiver, amount)]
            )
        return self.tx_hash


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mock_evm_private_key():
    """Mock EVM private key for testing"""
    return "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"


@pytest.fixture
def gate_values(mock_evm_private_key):
    """Minimal gate environment"""
    return {"SERVER_PRIVATE_KEY": mock_evm_private_key}


@pytest.fixture
def gate_config(gate_values):
    """Default gate: 0.1 mUSDT (6 decimals) on arbitrum-sepolia"""
    return GateConfig.from_mapping(gate_values)


@pytest.fixture
def fake_chain():
    return FakeChainClient()


@pytest.fixture
def fake_signer(fake_chain):
    return FakeSigner(fake_chain)


@pytest.fixture
def failing_signer(fake_chain):
    return FakeSigner(fake_chain, error=PaymentSubmissionError("User rejected the request"))
