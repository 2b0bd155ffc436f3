"""
FastAPI integration for the x402 payment gate
"""

from x402_evm.fastapi.app import create_app, error_response

__all__ = ["create_app", "error_response"]
