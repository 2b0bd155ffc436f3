"""
Wire types for the x402 payment gate
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from x402_evm.utils.address import normalize_evm_address
from x402_evm.utils.units import MAX_DECIMALS, parse_amount, to_base_units

PAYMENT_REQUIRED_ERROR = "Payment Required"
PAYMENT_REQUIRED_MESSAGE = "Access to this resource requires payment."

AccessLevel = Literal["granted"]


class PaymentDetails(BaseModel):
    """Payment challenge: what to pay, to whom, on which chain"""

    receiver: str
    amount: str
    currency: Optional[str] = None
    token_address: str = Field(alias="tokenAddress")
    decimals: int = Field(ge=0, le=MAX_DECIMALS)
    chain_id: Optional[int] = Field(None, alias="chainId")
    network: Optional[str] = None
    instruction: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("receiver", "token_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        return normalize_evm_address(value)

    @field_validator("amount")
    @classmethod
    def _check_amount(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("amount must not be empty")
        parse_amount(value)
        return value.strip()

    @model_validator(mode="after")
    def _check_base_units(self) -> "PaymentDetails":
        to_base_units(self.amount, self.decimals)
        return self


class PaymentRequired(BaseModel):
    """HTTP 402 response body"""

    error: str = PAYMENT_REQUIRED_ERROR
    message: str = PAYMENT_REQUIRED_MESSAGE
    payment_details: PaymentDetails = Field(alias="paymentDetails")

    class Config:
        populate_by_name = True


class VerifyRequest(BaseModel):
    """Payment proof submitted by the client"""

    tx_hash: str = Field(alias="txHash")

    class Config:
        populate_by_name = True


class VerifyResponse(BaseModel):
    """Successful verification response"""

    message: str
    access: AccessLevel = "granted"
    tx_hash: str = Field(alias="txHash")

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    """Error body returned for any rejected request"""

    error: str
    message: Optional[str] = None
    details: Optional[dict[str, Any]] = None
