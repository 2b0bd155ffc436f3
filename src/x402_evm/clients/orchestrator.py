"""
PaymentOrchestrator - drives one challenge/pay/confirm/verify cycle

States:
    idle -> fetching_challenge -> sending_payment -> awaiting_confirmation
         -> verifying -> success
    Any active state may move to error.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from x402_evm.clients.x402_http_client import X402HttpClient
from x402_evm.exceptions import ClientInputError, FlowInProgressError, X402Error
from x402_evm.signers.client.base import ClientSigner
from x402_evm.types import PaymentDetails
from x402_evm.utils.tx_verification import ChainClient, ReceiptStatus
from x402_evm.utils.units import to_base_units

logger = logging.getLogger(__name__)


class FlowStatus(str, Enum):
    IDLE = "idle"
    FETCHING_CHALLENGE = "fetching_challenge"
    SENDING_PAYMENT = "sending_payment"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    VERIFYING = "verifying"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def active(self) -> bool:
        return self not in (FlowStatus.IDLE, FlowStatus.SUCCESS, FlowStatus.ERROR)


class ProgressKind(str, Enum):
    REQUESTING = "requesting"
    PAYMENT_REQUIRED = "payment_required"
    PAYMENT_INITIATED = "payment_initiated"
    TRANSACTION_SENT = "transaction_sent"
    TRANSACTION_CONFIRMED = "transaction_confirmed"
    ACCESS_GRANTED = "access_granted"
    NO_PAYMENT_REQUIRED = "no_payment_required"
    ERROR = "error"


@dataclass(frozen=True)
class ProgressEvent:
    """One step of the flow; rendered to text only for display"""

    kind: ProgressKind
    status: FlowStatus
    data: dict[str, Any] = field(default_factory=dict)

    def render(self) -> str:
        kind = self.kind
        data = self.data
        if kind is ProgressKind.REQUESTING:
            return "Requesting protected resource..."
        if kind is ProgressKind.PAYMENT_REQUIRED:
            details = json.dumps(data.get("details", {}), indent=2)
            return f"Resource protected. Payment Required.\nDetails: {details}"
        if kind is ProgressKind.PAYMENT_INITIATED:
            return (
                f"Initiating payment of {data.get('amount')} {data.get('currency')} "
                f"to {data.get('receiver')}..."
            )
        if kind is ProgressKind.TRANSACTION_SENT:
            return f"Transaction sent! Hash: {data.get('tx_hash')}\nWaiting for confirmation..."
        if kind is ProgressKind.TRANSACTION_CONFIRMED:
            return "Transaction confirmed! Verifying with server..."
        if kind is ProgressKind.ACCESS_GRANTED:
            return "Access Granted!"
        if kind is ProgressKind.NO_PAYMENT_REQUIRED:
            return "Resource accessed successfully (no payment required)."
        return f"Error: {data.get('message')}"


def render_progress(events: Iterable[ProgressEvent]) -> str:
    """Join rendered events, one per paragraph."""
    return "\n".join(event.render() for event in events)


class PaymentOrchestrator:
    """
    Client-side payment flow for one session.

    Flow errors are recorded on the instance and never raised from run();
    cancellation propagates.
    """

    def __init__(
        self,
        http_client: X402HttpClient,
        signer: ClientSigner,
        chain: ChainClient,
        chain_id: int | None = None,
        confirmation_timeout: float = 120.0,
        poll_latency: float = 1.0,
    ) -> None:
        self._http = http_client
        self._signer = signer
        self._chain = chain
        self._chain_id = chain_id
        self._confirmation_timeout = confirmation_timeout
        self._poll_latency = poll_latency

        self._status = FlowStatus.IDLE
        self._events: list[ProgressEvent] = []
        self._payload: Any = None
        self._error: str | None = None
        self._tx_hash: str | None = None
        self._payment_details: PaymentDetails | None = None

    @property
    def status(self) -> FlowStatus:
        return self._status

    @property
    def events(self) -> tuple[ProgressEvent, ...]:
        return tuple(self._events)

    @property
    def payload(self) -> Any:
        return self._payload

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def tx_hash(self) -> str | None:
        return self._tx_hash

    @property
    def payment_details(self) -> PaymentDetails | None:
        return self._payment_details

    def render_progress(self) -> str:
        return render_progress(self._events)

    def _emit(self, kind: ProgressKind, **data: Any) -> None:
        event = ProgressEvent(kind=kind, status=self._status, data=data)
        self._events.append(event)
        logger.info(f"[{self._status.value}] {event.render()}")

    def _fail(self, message: str) -> None:
        self._status = FlowStatus.ERROR
        self._error = message
        self._emit(ProgressKind.ERROR, message=message)

    async def run(self) -> FlowStatus:
        """
        Run one full payment flow.

        Returns:
            Final status, SUCCESS or ERROR

        Raises:
            FlowInProgressError: A flow is already active on this instance
        """
        if self._status.active:
            raise FlowInProgressError(f"Payment flow already in progress ({self._status.value})")

        self._status = FlowStatus.FETCHING_CHALLENGE
        self._events = []
        self._payload = None
        self._error = None
        self._tx_hash = None
        self._payment_details = None

        try:
            await self._run_flow()
        except asyncio.CancelledError:
            self._fail("Payment flow cancelled")
            raise
        except X402Error as e:
            self._fail(str(e))
        except Exception as e:
            logger.error(f"Payment flow failed: {e}", exc_info=True)
            self._fail(str(e) or e.__class__.__name__)
        return self._status

    async def _run_flow(self) -> None:
        self._emit(ProgressKind.REQUESTING)
        resource = await self._http.request_resource()

        if not resource.requires_payment:
            self._payload = resource.payload
            self._status = FlowStatus.SUCCESS
            self._emit(ProgressKind.NO_PAYMENT_REQUIRED)
            return

        details = resource.payment_required.payment_details
        self._payment_details = details
        self._emit(ProgressKind.PAYMENT_REQUIRED, details=details.model_dump(by_alias=True))

        if (
            self._chain_id is not None
            and details.chain_id is not None
            and details.chain_id != self._chain_id
        ):
            raise ClientInputError(
                f"Payment challenge is for chain {details.chain_id}, "
                f"wallet is connected to chain {self._chain_id}"
            )
        amount = to_base_units(details.amount, details.decimals)

        self._status = FlowStatus.SENDING_PAYMENT
        self._emit(
            ProgressKind.PAYMENT_INITIATED,
            amount=details.amount,
            currency=details.currency or details.token_address,
            receiver=details.receiver,
        )
        tx_hash = await self._signer.transfer_token(details.token_address, details.receiver, amount)
        self._tx_hash = tx_hash

        self._status = FlowStatus.AWAITING_CONFIRMATION
        self._emit(ProgressKind.TRANSACTION_SENT, tx_hash=tx_hash)
        receipt = await self._chain.wait_for_transaction_receipt(
            tx_hash,
            timeout=self._confirmation_timeout,
            poll_latency=self._poll_latency,
        )
        if receipt.status != ReceiptStatus.SUCCESS:
            # The server reports the revert with its own error
            logger.warning(f"Transaction {tx_hash} reverted, submitting for verification anyway")

        self._status = FlowStatus.VERIFYING
        self._emit(ProgressKind.TRANSACTION_CONFIRMED, tx_hash=tx_hash)
        self._payload = await self._http.verify_payment(tx_hash)

        self._status = FlowStatus.SUCCESS
        self._emit(ProgressKind.ACCESS_GRANTED, tx_hash=tx_hash)
