"""
Client signer base interface
"""

from abc import ABC, abstractmethod


class ClientSigner(ABC):
    """
    Abstract base class for client signers.

    Responsible for submitting the ERC-20 transfer that settles a challenge.
    """

    @abstractmethod
    def get_address(self) -> str:
        """Get the signer's account address"""
        pass

    @abstractmethod
    async def transfer_token(self, token: str, receiver: str, amount: int) -> str:
        """
        Sign and broadcast an ERC-20 transfer.

        Args:
            token: Token contract address
            receiver: Recipient address
            amount: Amount in base units

        Returns:
            Transaction hash (0x-prefixed hex)

        Raises:
            PaymentSubmissionError: If the transfer could not be submitted
        """
        pass

    @abstractmethod
    async def check_balance(self, token: str) -> int:
        """
        Check token balance of the signer.

        Args:
            token: Token contract address

        Returns:
            Balance in base units
        """
        pass
