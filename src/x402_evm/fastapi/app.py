"""
FastAPI application exposing the payment gate
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from x402_evm.exceptions import (
    ChainLookupError,
    ClientInputError,
    InsufficientPaymentError,
    InternalError,
    VerificationError,
)
from x402_evm.server import X402Server
from x402_evm.types import ErrorResponse, VerifyRequest

logger = logging.getLogger(__name__)

SERVICE_NAME = "X402 Protected Resource Server"
INTERNAL_ERROR_MESSAGE = "Internal Server Error during verification"
MISSING_TX_HASH_MESSAGE = "Missing txHash in request body"


def _json_error(status_code: int, error: str, **extra) -> JSONResponse:
    body = ErrorResponse(error=error, **extra)
    return JSONResponse(content=body.model_dump(exclude_none=True), status_code=status_code)


def error_response(exc: Exception) -> JSONResponse:
    """Map a verification failure to its HTTP response"""
    if isinstance(exc, InsufficientPaymentError):
        return _json_error(
            400,
            "Insufficient Payment",
            message=str(exc),
            details={
                "amountPaid": str(exc.amount_paid),
                "requiredAmount": str(exc.required_amount),
            },
        )
    if isinstance(exc, ChainLookupError):
        return _json_error(404, str(exc))
    if isinstance(exc, (ClientInputError, VerificationError)):
        return _json_error(400, str(exc))
    if not isinstance(exc, InternalError):
        logger.error(f"Unexpected verification failure: {exc}", exc_info=exc)
    return _json_error(500, INTERNAL_ERROR_MESSAGE)


async def _read_verify_request(request: Request) -> VerifyRequest:
    """Parse the verify body; a missing or unusable body is a client error."""
    raw = await request.body()
    if not raw.strip():
        raise ClientInputError(MISSING_TX_HASH_MESSAGE)
    try:
        return VerifyRequest.model_validate_json(raw)
    except ValidationError as e:
        raise ClientInputError(MISSING_TX_HASH_MESSAGE) from e


def create_app(server: X402Server, cors_origins: list[str] | None = None) -> FastAPI:
    """
    Build the FastAPI app for a configured X402Server.

    Args:
        server: Gate to expose
        cors_origins: Allowed origins; defaults to the gate configuration

    Returns:
        FastAPI application
    """
    config = server.config
    app = FastAPI(title="X402 Server", description="Protected resource server")
    app.state.x402_server = server

    origins = list(cors_origins) if cors_origins is not None else list(config.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """Service info"""
        return {
            "service": SERVICE_NAME,
            "status": "running",
            "receiver": config.receiver_address,
            "network": config.network,
        }

    @app.get("/x402")
    async def protected_resource(request: Request):
        """Return the payment challenge, or the resource if already accessible"""
        result = await server.request_resource(request)
        if isinstance(result, dict):
            return result
        return JSONResponse(content=result.model_dump(by_alias=True), status_code=402)

    @app.post("/x402/verify")
    async def verify_payment(request: Request):
        """Verify a payment transaction and grant access"""
        try:
            body = await _read_verify_request(request)
            response = await server.verify_payment(body.tx_hash)
        except Exception as e:
            return error_response(e)
        return response.model_dump(by_alias=True)

    return app
