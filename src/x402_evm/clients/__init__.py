"""
x402 client module
"""

from x402_evm.clients.orchestrator import (
    FlowStatus,
    PaymentOrchestrator,
    ProgressEvent,
    ProgressKind,
    render_progress,
)
from x402_evm.clients.x402_http_client import ResourceResponse, X402HttpClient

__all__ = [
    "FlowStatus",
    "PaymentOrchestrator",
    "ProgressEvent",
    "ProgressKind",
    "ResourceResponse",
    "X402HttpClient",
    "render_progress",
]
