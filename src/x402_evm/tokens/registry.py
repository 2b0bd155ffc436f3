"""
Token registry - Centralized management of token configurations for all networks
"""

from dataclasses import dataclass

from x402_evm.exceptions import UnknownTokenError


@dataclass
class TokenInfo:
    """Token information"""

    address: str
    decimals: int
    name: str
    symbol: str


class TokenRegistry:
    """Token registry"""

    _tokens: dict[str, dict[str, TokenInfo]] = {
        # Arbitrum Sepolia (421614)
        "arbitrum-sepolia": {
            "MUSDT": TokenInfo(
                address="0x83BDe9dF64af5e475DB44ba21C1dF25e19A0cf9a",
                decimals=6,
                name="Mock USDT",
                symbol="mUSDT",
            ),
        },
        # Arbitrum One (42161)
        "arbitrum": {
            "USDC": TokenInfo(
                address="0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
                decimals=6,
                name="USD Coin",
                symbol="USDC",
            ),
            "USDT": TokenInfo(
                address="0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9",
                decimals=6,
                name="Tether USD",
                symbol="USDT",
            ),
        },
        # Base Sepolia (84532)
        "base-sepolia": {
            "USDC": TokenInfo(
                address="0x036CbD53842c5426634e7929541eC2318f3dCF7e",
                decimals=6,
                name="USD Coin",
                symbol="USDC",
            ),
        },
        # Base Mainnet (8453)
        "base": {
            "USDC": TokenInfo(
                address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
                decimals=6,
                name="USD Coin",
                symbol="USDC",
            ),
        },
    }

    @classmethod
    def register_token(cls, network: str, token: TokenInfo) -> None:
        """Register a custom token for specified network

        Args:
            network: Network label (e.g. "arbitrum-sepolia")
            token: TokenInfo to register
        """
        if network not in cls._tokens:
            cls._tokens[network] = {}
        cls._tokens[network][token.symbol.upper()] = token

    @classmethod
    def get_token(cls, network: str, symbol: str) -> TokenInfo:
        """Get token information for specified network and symbol

        Raises:
            UnknownTokenError: If token does not exist
        """
        tokens = cls._tokens.get(network, {})
        token = tokens.get(symbol.upper())
        if token is None:
            raise UnknownTokenError(f"Unknown token {symbol} on network {network}")
        return token

    @classmethod
    def find_by_address(cls, network: str, address: str) -> TokenInfo | None:
        """Find token information by address (case-insensitive)"""
        lower = address.lower()
        for info in cls._tokens.get(network, {}).values():
            if info.address.lower() == lower:
                return info
        return None
