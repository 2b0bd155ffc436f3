"""
x402 custom exception hierarchy
"""


class X402Error(Exception):
    """x402 base exception"""

    pass


class ClientInputError(X402Error):
    """Malformed or missing request fields"""

    pass


class TransactionAlreadyUsedError(ClientInputError):
    """Transaction hash was already redeemed for access"""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction {tx_hash} has already been used to grant access.")


class VerificationError(X402Error):
    """Settlement could not be established on-chain"""

    pass


class ChainLookupError(VerificationError):
    """Transaction hash is unknown to the chain"""

    def __init__(self, tx_hash: str, network: str | None = None):
        self.tx_hash = tx_hash
        self.network = network
        where = network or "chain"
        super().__init__(f"Transaction not found on {where}")


class PendingError(VerificationError):
    """Transaction exists but has no receipt yet"""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__("Transaction pending or not mined yet. Please wait.")


class RevertedError(VerificationError):
    """Transaction was mined but reverted"""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__("Transaction failed (reverted) on-chain.")


class InsufficientPaymentError(VerificationError):
    """Settled amount is below the required amount"""

    def __init__(
        self,
        amount_paid: int,
        required_amount: int,
        amount_paid_display: str,
        required_amount_display: str,
        currency: str = "",
    ):
        self.amount_paid = amount_paid
        self.required_amount = required_amount
        self.amount_paid_display = amount_paid_display
        self.required_amount_display = required_amount_display
        self.currency = currency
        unit = f" {currency}" if currency else ""
        super().__init__(
            "Payment not found or insufficient. "
            f"Received {amount_paid_display}{unit}. "
            f"Required: {required_amount_display}{unit}."
        )


class InternalError(X402Error):
    """Unexpected fault, e.g. the RPC endpoint is unavailable"""

    pass


class ConfigurationError(X402Error):
    """Configuration-related error"""

    pass


class UnsupportedNetworkError(ConfigurationError):
    """Unsupported network"""

    pass


class UnknownTokenError(ConfigurationError):
    """Unknown token"""

    pass


class PaymentSubmissionError(X402Error):
    """Wallet refused or failed to broadcast the payment"""

    pass


class TransactionTimeoutError(X402Error):
    """Transaction was not confirmed in time"""

    def __init__(self, tx_hash: str, timeout: float):
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(f"Transaction {tx_hash} was not confirmed within {timeout:g} seconds")


class UnexpectedResponseError(X402Error):
    """Resource server answered with a status the flow cannot handle"""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class VerificationRejectedError(X402Error):
    """Server refused to grant access for the submitted payment"""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class FlowInProgressError(X402Error):
    """A payment flow is already running on this orchestrator"""

    pass
