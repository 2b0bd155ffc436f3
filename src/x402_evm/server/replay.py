"""
In-process record of transaction hashes that already bought access
"""

import threading


class SpentTransactionStore:
    """Thread-safe set of redeemed transaction hashes (case-insensitive)"""

    def __init__(self) -> None:
        self._spent: set[str] = set()
        self._lock = threading.Lock()

    def __contains__(self, tx_hash: str) -> bool:
        with self._lock:
            return tx_hash.lower() in self._spent

    def __len__(self) -> int:
        with self._lock:
            return len(self._spent)

    def claim(self, tx_hash: str) -> bool:
        """Mark the hash as spent. Returns False if it was already spent."""
        key = tx_hash.lower()
        with self._lock:
            if key in self._spent:
                return False
            self._spent.add(key)
            return True
