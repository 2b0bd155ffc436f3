"""
X402HttpClient - HTTP calls to a payment-gated resource server
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from x402_evm.exceptions import ClientInputError, UnexpectedResponseError, VerificationRejectedError
from x402_evm.types import PaymentRequired

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE_PATH = "/x402"
DEFAULT_VERIFY_PATH = "/x402/verify"


@dataclass
class ResourceResponse:
    """Outcome of requesting the protected resource"""

    status_code: int
    payment_required: PaymentRequired | None = None
    payload: Any = None

    @property
    def requires_payment(self) -> bool:
        return self.payment_required is not None


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_text(body: Any, status_code: int) -> str:
    if isinstance(body, dict) and body.get("error"):
        error = str(body["error"])
        message = body.get("message")
        return f"{error}: {message}" if message else error
    if isinstance(body, str) and body.strip():
        return body.strip()
    return f"Verification failed with HTTP {status_code}"


class X402HttpClient:
    """
    HTTP client for the resource and verification endpoints.

    Wraps httpx.AsyncClient; the caller owns the client's lifecycle.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = "",
        resource_path: str = DEFAULT_RESOURCE_PATH,
        verify_path: str = DEFAULT_VERIFY_PATH,
    ) -> None:
        """
        Initialize HTTP client adapter.

        Args:
            http_client: httpx.AsyncClient instance
            base_url: Resource server URL, empty if http_client has a base_url
            resource_path: Path of the protected resource
            verify_path: Path of the verification endpoint
        """
        self._http_client = http_client
        base = base_url.rstrip("/")
        self._resource_url = f"{base}{resource_path}"
        self._verify_url = f"{base}{verify_path}"

    async def request_resource(self) -> ResourceResponse:
        """
        Request the protected resource.

        Returns:
            ResourceResponse with either a validated challenge (402) or the payload (2xx)

        Raises:
            ClientInputError: 402 body is not a complete payment challenge
            UnexpectedResponseError: Any other status
        """
        logger.info(f"Requesting protected resource: {self._resource_url}")
        response = await self._http_client.get(self._resource_url)
        logger.info(f"Received response: status={response.status_code}")

        if response.status_code == 402:
            body = _response_body(response)
            if not isinstance(body, dict):
                raise ClientInputError("Payment challenge is not a JSON object")
            try:
                payment_required = PaymentRequired.model_validate(body)
            except ValidationError as e:
                logger.error(f"Invalid payment challenge: {e}")
                raise ClientInputError(f"Invalid payment challenge: {e}") from e
            return ResourceResponse(status_code=402, payment_required=payment_required)

        if response.is_success:
            return ResourceResponse(status_code=response.status_code, payload=_response_body(response))

        raise UnexpectedResponseError(
            f"Unexpected response from resource server: HTTP {response.status_code}",
            status_code=response.status_code,
        )

    async def verify_payment(self, tx_hash: str) -> Any:
        """
        Submit the payment proof.

        Returns:
            Server payload on 200

        Raises:
            VerificationRejectedError: Server refused to grant access
        """
        logger.info(f"Submitting payment proof: {tx_hash}")
        response = await self._http_client.post(self._verify_url, json={"txHash": tx_hash})
        body = _response_body(response)
        if response.status_code == 200:
            return body

        message = _error_text(body, response.status_code)
        logger.warning(f"Verification rejected ({response.status_code}): {message}")
        raise VerificationRejectedError(message, status_code=response.status_code)
