from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from web3 import Web3

from clinic_bot.config import PoolConfig, Settings, select_pools, steward_address
from clinic_bot.domain import AccountData
from clinic_bot.execution import ExecutionManager
from clinic_bot.infra import RuntimeEventLogger, gather_bounded, run_blocking
from clinic_bot.onchain import NonceRegistry, Operator, PrivateTxRelay, connect


@dataclass
class JobContext:
    settings: Settings
    log: logging.Logger
    events: RuntimeEventLogger
    relay: PrivateTxRelay
    nonces: NonceRegistry = field(default_factory=NonceRegistry)

    def pools(self) -> list[PoolConfig]:
        return select_pools(self.settings.chains)

    async def connect(self, pool_cfg: PoolConfig) -> Operator:
        return await run_blocking(lambda: connect(pool_cfg, self.settings, self.log))

    def executor(self, operator: Operator) -> ExecutionManager:
        return ExecutionManager(
            operator,
            relay=self.relay,
            events=self.events,
            log=self.log,
            dry_run=self.settings.dry_run,
            private_tx_blocks=self.settings.private_tx_blocks,
            receipt_timeout=self.settings.receipt_timeout,
            nonces=self.nonces.get(operator.w3, operator.pool_cfg.chain_id, operator.sender),
        )


def make_context(settings: Settings, log: logging.Logger) -> JobContext:
    return JobContext(
        settings=settings,
        log=log,
        events=RuntimeEventLogger(settings.data_dir),
        relay=PrivateTxRelay(settings.relay_url, timeout=settings.http_timeout),
    )


def checksum(address: str) -> str:
    return Web3.to_checksum_address(address)


async def read_account_data(
    operator: Operator, users: list[str], *, limit: int, log: logging.Logger
) -> dict[str, AccountData]:
    """getUserAccountData for every user, fanned out in parallel. Failed reads are dropped."""
    pool = operator.pool()
    coros = [
        run_blocking(lambda u=u: pool.functions.getUserAccountData(checksum(u)).call())
        for u in users
    ]
    out: dict[str, AccountData] = {}
    for user, res in zip(users, await gather_bounded(coros, limit)):
        if isinstance(res, Exception):
            log.warning("getUserAccountData %s failed: %s", user, res)
            continue
        out[user] = AccountData.from_call(res)
    return out


async def run_per_pool(
    ctx: JobContext,
    name: str,
    fn: Callable[[Operator, str | None], Awaitable[object]],
    *,
    needs_steward: bool = True,
    pools: list[PoolConfig] | None = None,
) -> dict[str, object]:
    """Run ``fn`` pool by pool. A failing pool is logged and the next one runs."""
    out: dict[str, object] = {}
    for pool_cfg in pools if pools is not None else ctx.pools():
        steward = steward_address(pool_cfg)
        if needs_steward and steward is None:
            ctx.log.warning(
                "[%s] %s: no CLINIC_STEWARD_%s configured, skipping",
                name, pool_cfg.key, pool_cfg.key.upper(),
            )
            continue
        try:
            operator = await ctx.connect(pool_cfg)
            out[pool_cfg.key] = await fn(operator, steward)
        except Exception as e:
            ctx.log.exception("[%s] %s failed: %s", name, pool_cfg.key, e)
    return out
