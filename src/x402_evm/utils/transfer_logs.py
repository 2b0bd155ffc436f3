"""
ERC-20 Transfer event decoding from raw receipt logs
"""

from dataclasses import dataclass, field
from typing import Any

from eth_utils import to_checksum_address

from x402_evm.abi import TRANSFER_EVENT_TOPIC


@dataclass
class LogEntry:
    """A single receipt log as emitted on-chain"""

    address: str  # Emitting contract
    topics: list[bytes] = field(default_factory=list)
    data: bytes = b""


@dataclass
class TransferEvent:
    """Represents a token transfer event from a transaction"""

    token: str  # Token contract address
    from_addr: str  # Sender address
    to_addr: str  # Recipient address
    value: int  # Transfer amount in base units


def as_bytes(value: Any) -> bytes:
    """Coerce HexBytes, bytes or a 0x-hex string to raw bytes."""
    if isinstance(value, str):
        text = value[2:] if value.startswith(("0x", "0X")) else value
        return bytes.fromhex(text)
    return bytes(value)


def log_entry_from_web3(raw_log: Any) -> LogEntry:
    """Build a LogEntry from a web3 receipt log (AttributeDict or dict)."""
    return LogEntry(
        address=str(raw_log["address"]),
        topics=[as_bytes(topic) for topic in raw_log["topics"]],
        data=as_bytes(raw_log["data"]),
    )


def decode_transfer_log(log: LogEntry) -> TransferEvent:
    """
    Decode a Transfer(address,address,uint256) log.

    Args:
        log: Log entry to decode

    Returns:
        Decoded TransferEvent with checksummed addresses

    Raises:
        ValueError: If the log is not a well-formed ERC-20 Transfer
    """
    topics = [as_bytes(topic) for topic in log.topics]
    if len(topics) != 3:
        raise ValueError(f"Transfer log must have 3 topics, got {len(topics)}")
    if topics[0] != TRANSFER_EVENT_TOPIC:
        raise ValueError("Log is not a Transfer event")
    for topic in topics[1:]:
        if len(topic) != 32:
            raise ValueError("Indexed address topic must be 32 bytes")

    data = as_bytes(log.data)
    if len(data) != 32:
        raise ValueError(f"Transfer data must be 32 bytes, got {len(data)}")

    return TransferEvent(
        token=to_checksum_address(log.address),
        from_addr=to_checksum_address(topics[1][-20:]),
        to_addr=to_checksum_address(topics[2][-20:]),
        value=int.from_bytes(data, "big"),
    )
