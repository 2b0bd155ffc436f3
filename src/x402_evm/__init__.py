"""
x402-evm - HTTP 402 payment gate for ERC-20 transfers on EVM chains

Provides the resource server (challenge + on-chain verification) and the
paying client (challenge, transfer, confirmation, verification).
"""

__version__ = "0.1.0"

from x402_evm.types import (
    PaymentDetails,
    PaymentRequired,
    VerifyRequest,
    VerifyResponse,
    ErrorResponse,
)
from x402_evm.exceptions import (
    X402Error,
    ClientInputError,
    TransactionAlreadyUsedError,
    VerificationError,
    ChainLookupError,
    PendingError,
    RevertedError,
    InsufficientPaymentError,
    InternalError,
    ConfigurationError,
    UnsupportedNetworkError,
    UnknownTokenError,
    PaymentSubmissionError,
    TransactionTimeoutError,
    UnexpectedResponseError,
    VerificationRejectedError,
    FlowInProgressError,
)
from x402_evm.config import ClientConfig, GateConfig, NetworkConfig
from x402_evm.tokens import TokenInfo, TokenRegistry
from x402_evm.utils.tx_verification import PaymentVerifier, VerificationResult

__all__ = [
    "__version__",
    # Types
    "PaymentDetails",
    "PaymentRequired",
    "VerifyRequest",
    "VerifyResponse",
    "ErrorResponse",
    # Exceptions
    "X402Error",
    "ClientInputError",
    "TransactionAlreadyUsedError",
    "VerificationError",
    "ChainLookupError",
    "PendingError",
    "RevertedError",
    "InsufficientPaymentError",
    "InternalError",
    "ConfigurationError",
    "UnsupportedNetworkError",
    "UnknownTokenError",
    "PaymentSubmissionError",
    "TransactionTimeoutError",
    "UnexpectedResponseError",
    "VerificationRejectedError",
    "FlowInProgressError",
    # Configuration
    "ClientConfig",
    "GateConfig",
    "NetworkConfig",
    # Tokens
    "TokenInfo",
    "TokenRegistry",
    # Verification
    "PaymentVerifier",
    "VerificationResult",
]
