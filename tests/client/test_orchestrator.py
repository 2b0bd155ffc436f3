import asyncio

import httpx
import pytest

from conftest import RECEIVER_ADDRESS, TOKEN_ADDRESS, TX_HASH, FakeSigner
from x402_evm.clients import (
    FlowStatus,
    PaymentOrchestrator,
    ProgressKind,
    X402HttpClient,
    render_progress,
)
from x402_evm.exceptions import FlowInProgressError
from x402_evm.fastapi import create_app
from x402_evm.server import X402Server
from x402_evm.utils.tx_verification import ReceiptStatus


def _orchestrator(app, signer, chain, **kwargs) -> PaymentOrchestrator:
    http_client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )
    return PaymentOrchestrator(X402HttpClient(http_client), signer, chain, **kwargs)


@pytest.fixture
def app(gate_config, fake_chain):
    return create_app(X402Server(gate_config, chain=fake_chain))


@pytest.mark.anyio
async def test_full_flow_grants_access(app, fake_chain, fake_signer):
    orchestrator = _orchestrator(app, fake_signer, fake_chain, chain_id=421614)

    status = await orchestrator.run()

    assert status is FlowStatus.SUCCESS
    assert orchestrator.error is None
    assert orchestrator.tx_hash == TX_HASH
    assert orchestrator.payload == {"message": "Hello World", "access": "granted", "txHash": TX_HASH}
    assert fake_signer.transfers == [(TOKEN_ADDRESS, RECEIVER_ADDRESS, 100000)]
    assert fake_chain.wait_calls == [(TX_HASH, 120.0, 1.0)]
    assert [event.kind for event in orchestrator.events] == [
        ProgressKind.REQUESTING,
        ProgressKind.PAYMENT_REQUIRED,
        ProgressKind.PAYMENT_INITIATED,
        ProgressKind.TRANSACTION_SENT,
        ProgressKind.TRANSACTION_CONFIRMED,
        ProgressKind.ACCESS_GRANTED,
    ]


@pytest.mark.anyio
async def test_progress_renders_messages(app, fake_chain, fake_signer):
    orchestrator = _orchestrator(app, fake_signer, fake_chain)
    await orchestrator.run()

    text = render_progress(orchestrator.events)
    assert text.startswith("Requesting protected resource...")
    assert "Resource protected. Payment Required.\nDetails: {" in text
    assert f"Initiating payment of 0.1 mUSDT to {RECEIVER_ADDRESS}..." in text
    assert f"Transaction sent! Hash: {TX_HASH}\nWaiting for confirmation..." in text
    assert "Transaction confirmed! Verifying with server..." in text
    assert text.endswith("Access Granted!")
    assert orchestrator.render_progress() == text


@pytest.mark.anyio
async def test_resource_without_payment(fake_chain, fake_signer, gate_config):
    server = X402Server(gate_config, chain=fake_chain, access_policy=lambda request: True)
    orchestrator = _orchestrator(create_app(server), fake_signer, fake_chain)

    assert await orchestrator.run() is FlowStatus.SUCCESS
    assert fake_signer.transfers == []
    assert orchestrator.payload == {"message": "Hello World", "access": "granted"}
    assert orchestrator.events[-1].render() == (
        "Resource accessed successfully (no payment required)."
    )


@pytest.mark.anyio
async def test_incomplete_challenge_is_never_paid(fake_chain, fake_signer):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            402,
            json={
                "error": "Payment Required",
                "message": "pay",
                "paymentDetails": {"receiver": RECEIVER_ADDRESS, "amount": "0.1"},
            },
        )

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    orchestrator = PaymentOrchestrator(
        X402HttpClient(http_client, "http://resource.test"), fake_signer, fake_chain
    )

    assert await orchestrator.run() is FlowStatus.ERROR
    assert fake_signer.transfers == []
    assert "Invalid payment challenge" in orchestrator.error
    assert orchestrator.events[-1].kind is ProgressKind.ERROR


@pytest.mark.anyio
async def test_oversized_challenge_amount_is_never_paid(fake_chain, fake_signer):
    def handler(request: httpx.Request) -> httpx.Response:
        details = {
            "receiver": RECEIVER_ADDRESS,
            "amount": "1e30000000",
            "tokenAddress": TOKEN_ADDRESS,
            "decimals": 6,
        }
        return httpx.Response(402, json={"error": "Payment Required", "paymentDetails": details})

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    orchestrator = PaymentOrchestrator(
        X402HttpClient(http_client, "http://resource.test"), fake_signer, fake_chain
    )

    assert await orchestrator.run() is FlowStatus.ERROR
    assert fake_signer.transfers == []
    assert "exceeds uint256" in orchestrator.error


@pytest.mark.anyio
async def test_chain_mismatch_stops_before_payment(app, fake_chain, fake_signer):
    orchestrator = _orchestrator(app, fake_signer, fake_chain, chain_id=1)

    assert await orchestrator.run() is FlowStatus.ERROR
    assert fake_signer.transfers == []
    assert "chain 421614" in orchestrator.error


@pytest.mark.anyio
async def test_signer_failure(app, fake_chain, failing_signer):
    orchestrator = _orchestrator(app, failing_signer, fake_chain)

    assert await orchestrator.run() is FlowStatus.ERROR
    assert orchestrator.error == "User rejected the request"
    assert orchestrator.events[-1].render() == "Error: User rejected the request"
    assert orchestrator.tx_hash is None


@pytest.mark.anyio
async def test_confirmation_timeout(app, fake_chain):
    signer = FakeSigner(fake_chain, mine=False)
    orchestrator = _orchestrator(
        app, signer, fake_chain, confirmation_timeout=5.0, poll_latency=0.5
    )

    assert await orchestrator.run() is FlowStatus.ERROR
    assert fake_chain.wait_calls == [(TX_HASH, 5.0, 0.5)]
    assert "was not confirmed within 5 seconds" in orchestrator.error
    assert orchestrator.tx_hash == TX_HASH


@pytest.mark.anyio
async def test_server_rejection_is_recorded(app, fake_chain):
    class ShortSigner(FakeSigner):
        async def transfer_token(self, token, receiver, amount):
            return await super().transfer_token(token, receiver, amount - 1)

    orchestrator = _orchestrator(app, ShortSigner(fake_chain), fake_chain)

    assert await orchestrator.run() is FlowStatus.ERROR
    assert orchestrator.error.startswith("Insufficient Payment: ")
    assert "Received 0.099999 mUSDT" in orchestrator.error


@pytest.mark.anyio
async def test_reverted_payment_is_reported_by_server(app, fake_chain):
    class RevertingSigner(FakeSigner):
        async def transfer_token(self, token, receiver, amount):
            tx_hash = await super().transfer_token(token, receiver, amount)
            self.chain.receipts[tx_hash].status = ReceiptStatus.REVERTED
            return tx_hash

    orchestrator = _orchestrator(app, RevertingSigner(fake_chain), fake_chain)

    assert await orchestrator.run() is FlowStatus.ERROR
    assert orchestrator.error == "Transaction failed (reverted) on-chain."


@pytest.mark.anyio
async def test_rerun_after_completion_starts_fresh(app, fake_chain, failing_signer):
    orchestrator = _orchestrator(app, failing_signer, fake_chain)
    await orchestrator.run()
    assert orchestrator.status is FlowStatus.ERROR

    failing_signer.error = None
    assert await orchestrator.run() is FlowStatus.SUCCESS
    assert orchestrator.error is None
    assert orchestrator.events[0].kind is ProgressKind.REQUESTING
    assert not any(event.kind is ProgressKind.ERROR for event in orchestrator.events)


@pytest.mark.anyio
async def test_reentry_is_rejected(app, fake_chain):
    started = asyncio.Event()
    release = asyncio.Event()

    class SlowSigner(FakeSigner):
        async def transfer_token(self, token, receiver, amount):
            started.set()
            await release.wait()
            return await super().transfer_token(token, receiver, amount)

    orchestrator = _orchestrator(app, SlowSigner(fake_chain), fake_chain)
    first = asyncio.create_task(orchestrator.run())
    await started.wait()

    assert orchestrator.status is FlowStatus.SENDING_PAYMENT
    with pytest.raises(FlowInProgressError):
        await orchestrator.run()

    release.set()
    assert await first is FlowStatus.SUCCESS


@pytest.mark.anyio
async def test_cancellation_propagates(app, fake_chain):
    started = asyncio.Event()

    class HangingSigner(FakeSigner):
        async def transfer_token(self, token, receiver, amount):
            started.set()
            await asyncio.Event().wait()

    orchestrator = _orchestrator(app, HangingSigner(fake_chain), fake_chain)
    task = asyncio.create_task(orchestrator.run())
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert orchestrator.status is FlowStatus.ERROR
    assert orchestrator.error == "Payment flow cancelled"
