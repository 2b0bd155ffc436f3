import asyncio
import os
import sys
from pathlib import Path

import httpx

from x402_evm.clients import FlowStatus, PaymentOrchestrator, X402HttpClient
from x402_evm.config import ClientConfig
from x402_evm.exceptions import ConfigurationError
from x402_evm.logging_config import setup_logging
from x402_evm.signers.client import EvmClientSigner
from x402_evm.utils.evm_client import EvmChainClient

setup_logging(os.getenv("LOG_LEVEL", "WARNING"))

ENV_FILE = Path(__file__).parent.parent.parent.parent / ".env"


async def main() -> int:
    try:
        config = ClientConfig.from_env(env_file=str(ENV_FILE))
    except ConfigurationError as e:
        print(f"\n❌ Error: {e}")
        print("\nPlease add CLIENT_PRIVATE_KEY to the .env file\n")
        return 1

    print("Initializing X402 client...")
    print(f"  Network: {config.network} (chainId {config.chain_id})")
    print(f"  Resource server: {config.resource_server_url}")
    print(f"  Client Address: {config.payer_address}")

    signer = EvmClientSigner.from_private_key(
        config.private_key, config.rpc_url, chain_id=config.chain_id
    )
    chain = EvmChainClient(config.rpc_url)

    async with httpx.AsyncClient(timeout=60.0) as http_client:
        orchestrator = PaymentOrchestrator(
            X402HttpClient(http_client, config.resource_server_url),
            signer,
            chain,
            chain_id=config.chain_id,
            confirmation_timeout=config.confirmation_timeout,
            poll_latency=config.poll_latency,
        )
        status = await orchestrator.run()

    print()
    print(orchestrator.render_progress())
    if status is FlowStatus.SUCCESS:
        print(f"\n✅ Response: {orchestrator.payload}")
        return 0
    print(f"\n❌ Flow failed: {orchestrator.error}")
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
