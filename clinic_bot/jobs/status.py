from __future__ import annotations

import asyncio

from clinic_bot.config import steward_address
from clinic_bot.domain import BASE_CURRENCY_UNIT
from clinic_bot.infra import run_blocking
from clinic_bot.jobs.base import JobContext
from clinic_bot.onchain import Operator


async def read_budget(operator: Operator, steward_addr: str) -> int:
    steward = operator.steward(steward_addr)
    return int(await run_blocking(lambda: steward.functions.availableBudget().call()))


async def run(ctx: JobContext) -> dict[str, int]:
    """Log the ClinicSteward's remaining budget on every chain, in base currency units."""

    async def _one(pool_cfg, steward):
        operator = await ctx.connect(pool_cfg)
        return await read_budget(operator, steward)

    pools = [(p, steward_address(p)) for p in ctx.pools()]
    for p, steward in pools:
        if steward is None:
            ctx.log.warning("[status] %s: no CLINIC_STEWARD_%s configured", p.key, p.key.upper())
    pools = [(p, s) for p, s in pools if s is not None]

    results = await asyncio.gather(*[_one(p, s) for p, s in pools], return_exceptions=True)
    out: dict[str, int] = {}
    for (p, _), res in zip(pools, results):
        if isinstance(res, Exception):
            ctx.log.error("[status] %s: %s", p.key, res)
            continue
        out[p.key] = res
        ctx.log.info("%s %d", p.chain_name, res // BASE_CURRENCY_UNIT)
    return out
