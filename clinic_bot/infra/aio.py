from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any


async def run_blocking(fn: Callable[[], Any]) -> Any:
    """Run a blocking web3 call in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, fn)


async def gather_bounded(coros: list[Awaitable], limit: int) -> list:
    sem = asyncio.Semaphore(max(1, int(limit)))

    async def _run(coro):
        async with sem:
            return await coro

    return await asyncio.gather(*[_run(c) for c in coros], return_exceptions=True)
