"""
X402 Network Configuration

Known EVM networks plus the immutable startup configuration of the payment
gate (server) and the paying client. Values come from the process
environment, optionally layered with a ``.env`` file and explicit overrides.
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values
from eth_account import Account

from x402_evm.exceptions import ConfigurationError, UnknownTokenError, UnsupportedNetworkError
from x402_evm.tokens import TokenRegistry
from x402_evm.utils.address import normalize_evm_address
from x402_evm.utils.units import parse_amount, to_base_units


class NetworkConfig:
    """Network configuration for chain IDs and RPC endpoints"""

    ARBITRUM_SEPOLIA = "arbitrum-sepolia"
    ARBITRUM = "arbitrum"
    BASE_SEPOLIA = "base-sepolia"
    BASE = "base"

    CHAIN_IDS: Dict[str, int] = {
        "arbitrum-sepolia": 421614,
        "arbitrum": 42161,
        "base-sepolia": 84532,
        "base": 8453,
    }

    RPC_URLS: Dict[str, str] = {
        "arbitrum-sepolia": "https://sepolia-rollup.arbitrum.io/rpc",
        "arbitrum": "https://arb1.arbitrum.io/rpc",
        "base-sepolia": "https://sepolia.base.org",
        "base": "https://mainnet.base.org",
    }

    # Token used when X402_TOKEN_SYMBOL is not set
    DEFAULT_TOKENS: Dict[str, str] = {
        "arbitrum-sepolia": "mUSDT",
        "arbitrum": "USDC",
        "base-sepolia": "USDC",
        "base": "USDC",
    }

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        """Get chain ID for network

        Raises:
            UnsupportedNetworkError: If network is not known
        """
        chain_id = cls.CHAIN_IDS.get(network)
        if chain_id is None:
            raise UnsupportedNetworkError(f"Unsupported network: {network}")
        return chain_id

    @classmethod
    def get_rpc_url(cls, network: str) -> str | None:
        """Get the default RPC URL for a network, or None if not configured"""
        return cls.RPC_URLS.get(network)


def load_environment(
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Merge ``base`` (default: os.environ), the ``.env`` file and ``overrides``.

    Process environment wins over the file; overrides win over both.
    Set ``env_file`` to None to skip file loading.
    """
    merged: Dict[str, str] = dict(os.environ if base is None else base)
    if env_file is not None:
        for key, value in dotenv_values(env_file).items():
            if value is not None:
                merged.setdefault(key, value)
    if overrides:
        merged.update(overrides)
    return merged


def _account_from_key(raw_key: Optional[str], env_key: str):
    key = (raw_key or "").strip()
    if not key:
        raise ConfigurationError(f"{env_key} must be provided")
    if not key.startswith("0x"):
        key = "0x" + key
    if len(key) != 66:
        raise ConfigurationError(f"{env_key} must be 32 bytes (64 hex chars)")
    try:
        return Account.from_key(key)
    except Exception as exc:
        raise ConfigurationError(f"{env_key} is not a valid private key: {exc}") from exc


def _resolve_chain(values: Mapping[str, str]) -> tuple[str, int, str]:
    network = values.get("X402_NETWORK", NetworkConfig.ARBITRUM_SEPOLIA).strip()
    try:
        if values.get("X402_CHAIN_ID"):
            chain_id = int(values["X402_CHAIN_ID"])
        else:
            chain_id = NetworkConfig.get_chain_id(network)
    except ValueError as exc:
        raise ConfigurationError(f"X402_CHAIN_ID must be an integer: {exc}") from exc

    rpc_url = values.get("RPC_URL") or NetworkConfig.get_rpc_url(network)
    if not rpc_url:
        raise UnsupportedNetworkError(f"No RPC endpoint configured for network: {network}")
    return network, chain_id, rpc_url


def _resolve_token(values: Mapping[str, str], network: str) -> tuple[str, str, int]:
    """Return (symbol, checksummed address, decimals) from env and the token registry."""
    symbol = values.get("X402_TOKEN_SYMBOL") or NetworkConfig.DEFAULT_TOKENS.get(network, "")
    raw_address = values.get("X402_TOKEN_ADDRESS")
    raw_decimals = values.get("X402_TOKEN_DECIMALS")

    known = None
    if raw_address:
        known = TokenRegistry.find_by_address(network, raw_address)
    elif symbol:
        try:
            known = TokenRegistry.get_token(network, symbol)
        except UnknownTokenError:
            known = None

    if not raw_address and known is None:
        raise ConfigurationError(
            f"X402_TOKEN_ADDRESS must be provided for token {symbol or '?'} on {network}"
        )
    try:
        address = normalize_evm_address(raw_address or known.address, "X402_TOKEN_ADDRESS")
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    if raw_decimals is not None:
        try:
            decimals = int(raw_decimals)
        except ValueError as exc:
            raise ConfigurationError("X402_TOKEN_DECIMALS must be an integer") from exc
    elif known is not None:
        decimals = known.decimals
    else:
        raise ConfigurationError(f"X402_TOKEN_DECIMALS must be provided for token {address}")
    if decimals < 0:
        raise ConfigurationError("X402_TOKEN_DECIMALS must not be negative")

    if not symbol:
        symbol = known.symbol if known is not None else "TOKEN"
    return symbol, address, decimals


def _parse_bool(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GateConfig:
    """
    Process-wide payment gate configuration.

    Built once at startup and shared read-only by the verifier and the
    resource gate. The receiver key is only used to derive the address.
    """

    rpc_url: str
    network: str
    chain_id: int
    receiver_address: str
    token_address: str
    token_symbol: str
    decimals: int
    amount: Decimal
    required_units: int
    resource_message: str = "Hello World"
    single_use_tx: bool = False
    cors_origins: tuple[str, ...] = ("*",)
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def amount_display(self) -> str:
        return format(self.amount, "f")

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "GateConfig":
        account = _account_from_key(values.get("SERVER_PRIVATE_KEY"), "SERVER_PRIVATE_KEY")
        network, chain_id, rpc_url = _resolve_chain(values)
        symbol, token_address, decimals = _resolve_token(values, network)

        amount_raw = values.get("X402_PAYMENT_AMOUNT", "0.1")
        try:
            amount = parse_amount(amount_raw)
            required_units = to_base_units(amount, decimals)
        except ValueError as exc:
            raise ConfigurationError(f"X402_PAYMENT_AMOUNT is invalid: {exc}") from exc

        origins = tuple(
            origin.strip()
            for origin in values.get("X402_CORS_ORIGINS", "*").split(",")
            if origin.strip()
        )
        try:
            port = int(values.get("PORT", "8000"))
        except ValueError as exc:
            raise ConfigurationError("PORT must be an integer") from exc

        return cls(
            rpc_url=rpc_url,
            network=network,
            chain_id=chain_id,
            receiver_address=account.address,
            token_address=token_address,
            token_symbol=symbol,
            decimals=decimals,
            amount=amount,
            required_units=required_units,
            resource_message=values.get("X402_RESOURCE_MESSAGE", "Hello World"),
            single_use_tx=_parse_bool(values.get("X402_SINGLE_USE_TX")),
            cors_origins=origins or ("*",),
            host=values.get("HOST", "0.0.0.0"),
            port=port,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
    ) -> "GateConfig":
        return cls.from_mapping(load_environment(env_file, overrides, base))


@dataclass(frozen=True)
class ClientConfig:
    """Configuration of a paying client session"""

    private_key: str = field(repr=False)
    payer_address: str
    rpc_url: str
    network: str
    chain_id: int
    resource_server_url: str = "http://localhost:8000"
    confirmation_timeout: float = 120.0
    poll_latency: float = 1.0

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ClientConfig":
        account = _account_from_key(values.get("CLIENT_PRIVATE_KEY"), "CLIENT_PRIVATE_KEY")
        network, chain_id, rpc_url = _resolve_chain(values)
        try:
            confirmation_timeout = float(values.get("X402_CONFIRMATION_TIMEOUT", "120"))
            poll_latency = float(values.get("X402_POLL_LATENCY", "1.0"))
        except ValueError as exc:
            raise ConfigurationError(f"Invalid confirmation settings: {exc}") from exc
        if confirmation_timeout <= 0 or poll_latency <= 0:
            raise ConfigurationError("Confirmation timeout and poll latency must be positive")

        return cls(
            private_key="0x" + bytes(account.key).hex(),
            payer_address=account.address,
            rpc_url=rpc_url,
            network=network,
            chain_id=chain_id,
            resource_server_url=values.get(
                "RESOURCE_SERVER_URL", "http://localhost:8000"
            ).rstrip("/"),
            confirmation_timeout=confirmation_timeout,
            poll_latency=poll_latency,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
    ) -> "ClientConfig":
        return cls.from_mapping(load_environment(env_file, overrides, base))
