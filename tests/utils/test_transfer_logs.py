import pytest
from hexbytes import HexBytes

from conftest import OTHER_ADDRESS, PAYER_ADDRESS, RECEIVER_ADDRESS, TOKEN_ADDRESS, make_transfer_log
from x402_evm.utils.transfer_logs import LogEntry, decode_transfer_log, log_entry_from_web3


def test_decode_transfer_log():
    log = make_transfer_log(TOKEN_ADDRESS, PAYER_ADDRESS, RECEIVER_ADDRESS, 100000)
    event = decode_transfer_log(log)

    assert event.token == TOKEN_ADDRESS
    assert event.from_addr == PAYER_ADDRESS
    assert event.to_addr == RECEIVER_ADDRESS
    assert event.value == 100000


def test_decode_transfer_log_accepts_hex_strings():
    raw = make_transfer_log(TOKEN_ADDRESS.lower(), PAYER_ADDRESS, OTHER_ADDRESS, 5)
    log = LogEntry(
        address=raw.address,
        topics=["0x" + topic.hex() for topic in raw.topics],
        data="0x" + raw.data.hex(),
    )
    event = decode_transfer_log(log)
    assert event.token == TOKEN_ADDRESS
    assert event.to_addr == OTHER_ADDRESS
    assert event.value == 5


def test_decode_rejects_other_event():
    log = make_transfer_log(TOKEN_ADDRESS, PAYER_ADDRESS, RECEIVER_ADDRESS, 1)
    log.topics[0] = b"\x01" * 32
    with pytest.raises(ValueError):
        decode_transfer_log(log)


def test_decode_rejects_wrong_topic_count():
    log = make_transfer_log(TOKEN_ADDRESS, PAYER_ADDRESS, RECEIVER_ADDRESS, 1)
    # ERC-721 Transfer indexes the token id as a fourth topic
    log.topics.append(b"\x00" * 32)
    with pytest.raises(ValueError):
        decode_transfer_log(log)


def test_decode_rejects_short_data():
    log = make_transfer_log(TOKEN_ADDRESS, PAYER_ADDRESS, RECEIVER_ADDRESS, 1)
    log.data = b"\x01"
    with pytest.raises(ValueError):
        decode_transfer_log(log)


def test_log_entry_from_web3():
    raw = make_transfer_log(TOKEN_ADDRESS, PAYER_ADDRESS, RECEIVER_ADDRESS, 42)
    web3_log = {
        "address": TOKEN_ADDRESS,
        "topics": [HexBytes(topic) for topic in raw.topics],
        "data": HexBytes(raw.data),
    }
    entry = log_entry_from_web3(web3_log)
    assert entry.topics == raw.topics
    assert decode_transfer_log(entry).value == 42
