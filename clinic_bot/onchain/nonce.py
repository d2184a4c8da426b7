from __future__ import annotations

import asyncio

from clinic_bot.infra import run_blocking


class NonceManager:
    """Nonce allocator with the pending count as a floor.

    Private relay transactions never show up in the public node's pending
    pool, so consecutive submissions must count up locally.
    """

    def __init__(self, web3, address):
        self.w3 = web3
        self.address = address
        self._lock = asyncio.Lock()
        self._next_nonce = None

    async def next_nonce(self) -> int:
        async with self._lock:
            chain_nonce = await run_blocking(
                lambda: self.w3.eth.get_transaction_count(self.address, "pending")
            )
            if self._next_nonce is None or self._next_nonce < chain_nonce:
                self._next_nonce = chain_nonce
            out = self._next_nonce
            self._next_nonce += 1
            return out

    async def reset_from_chain(self) -> None:
        async with self._lock:
            self._next_nonce = await run_blocking(
                lambda: self.w3.eth.get_transaction_count(self.address, "pending")
            )


class NonceRegistry:
    """One allocator per (chain id, sender), shared by pools on the same chain."""

    def __init__(self):
        self._managers: dict[tuple[int, str], NonceManager] = {}

    def get(self, web3, chain_id: int, address: str) -> NonceManager:
        key = (int(chain_id), address.lower())
        manager = self._managers.get(key)
        if manager is None:
            manager = NonceManager(web3, address)
            self._managers[key] = manager
        return manager
