"""
Shared ABI definitions for the ERC-20 token contract
"""

from typing import Any, List

from web3 import Web3

TRANSFER_EVENT_SIGNATURE = "Transfer(address,address,uint256)"

# keccak256("Transfer(address,address,uint256)")
TRANSFER_EVENT_TOPIC: bytes = bytes(Web3.keccak(text=TRANSFER_EVENT_SIGNATURE))

# ERC20 Token ABI (only the pieces the gate and the wallet touch)
ERC20_ABI: List[dict[str, Any]] = [
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "Transfer",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    },
]
