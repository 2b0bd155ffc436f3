import os
import sys
from pathlib import Path

import uvicorn

from x402_evm.config import GateConfig
from x402_evm.exceptions import ConfigurationError
from x402_evm.fastapi import create_app
from x402_evm.logging_config import get_logger, setup_logging
from x402_evm.server import X402Server

setup_logging(os.getenv("LOG_LEVEL", "INFO"))
logger = get_logger(__name__)

ENV_FILE = Path(__file__).parent.parent.parent.parent / ".env"

try:
    config = GateConfig.from_env(env_file=str(ENV_FILE))
except ConfigurationError as e:
    print(f"\n❌ Error: {e}")
    print("\nPlease set SERVER_PRIVATE_KEY (and optionally RPC_URL) in the .env file\n")
    sys.exit(1)

server = X402Server(config)
app = create_app(server)

logger.info(f"Server receiving address: {config.receiver_address}")
logger.info(f"Connected to RPC: {config.rpc_url}")

print("Server Configuration:")
print(f"  Network: {config.network} (chainId {config.chain_id})")
print(f"  Receiver: {config.receiver_address}")
print(f"  Token: {config.token_symbol} {config.token_address} (decimals={config.decimals})")
print(f"  Price: {config.amount_display} {config.token_symbol}")
print(f"  Single-use transactions: {config.single_use_tx}")

if __name__ == "__main__":
    print("\n" + "=" * 80)
    print("Starting X402 Protected Resource Server")
    print("=" * 80)
    print(f"Host: {config.host}")
    print(f"Port: {config.port}")
    print("Endpoints:")
    print(f"  GET  /x402         - Protected resource ({config.amount_display} {config.token_symbol})")
    print("  POST /x402/verify  - Submit payment transaction hash")
    print("=" * 80 + "\n")

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level="info",
        access_log=True,
    )
