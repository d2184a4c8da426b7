"""Liquidation batcher.

Pulls low health factor users from the indexer, re-checks each one on-chain,
groups them by (debt reserve, collateral reserve) and liquidates them through
the ClinicSteward in gas-bounded batches.
"""

from __future__ import annotations

from clinic_bot.data import IndexerClient
from clinic_bot.execution import ExecutionResult
from clinic_bot.jobs.base import JobContext, checksum, read_account_data, run_per_pool
from clinic_bot.onchain import Operator
from clinic_bot.strategy import (
    block_gas_budget,
    chunk,
    group_liquidations,
    liquidation_gas,
    liquidation_gate,
    max_liquidations_per_tx,
)


async def liquidate_pool(
    ctx: JobContext, operator: Operator, steward_addr: str, indexer
) -> list[ExecutionResult]:
    cfg = operator.pool_cfg
    log = ctx.log
    users = await indexer.health_factors(cfg.chain_id, cfg.pool, page_size=ctx.settings.hf_page_size)
    groups = group_liquidations(users)
    log.info("[liquidate] %s: %d candidates in %d reserve pairs", cfg.key, len(users), len(groups))

    per_tx = max_liquidations_per_tx(block_gas_budget(cfg.gas_limit, ctx.settings.gas_budget_pct))
    steward = operator.steward(steward_addr)
    executor = ctx.executor(operator)
    results: list[ExecutionResult] = []
    for (debt, collateral), candidates in groups.items():
        accounts = await read_account_data(
            operator, candidates, limit=ctx.settings.read_concurrency, log=log
        )
        batch = []
        for user in candidates:
            account = accounts.get(user)
            if account is None:
                continue
            ok, reason = liquidation_gate(account)
            if ok:
                batch.append(user)
            else:
                log.debug("skip %s: %s", user, reason)
        if not batch:
            continue

        chunks = chunk(batch, per_tx)
        if len(chunks) > 1:
            log.info(
                "chunking %d liquidations into %d batches of at most %d",
                len(batch), len(chunks), per_tx,
            )
        for users_chunk in chunks:
            log.info(
                "liquidating %d users with debt %s and collateral %s on %s",
                len(users_chunk), debt, collateral, cfg.key,
            )
            # last argument: repay with aTokens held by the steward
            call = steward.functions.batchLiquidate(
                checksum(debt),
                checksum(collateral),
                [checksum(u) for u in users_chunk],
                True,
            )
            results.append(
                await executor.execute(
                    call,
                    gas=liquidation_gas(len(users_chunk)),
                    label=f"batchLiquidate {cfg.key} {debt}/{collateral} x{len(users_chunk)}",
                    confirmations=ctx.settings.confirmations,
                )
            )
    return results


async def run(ctx: JobContext, indexer: IndexerClient | None = None) -> dict:
    own = indexer is None
    indexer = indexer or IndexerClient(
        ctx.settings.api_url, timeout=ctx.settings.http_timeout, log=ctx.log
    )
    try:
        return await run_per_pool(
            ctx,
            "liquidate",
            lambda operator, steward: liquidate_pool(ctx, operator, steward, indexer),
        )
    finally:
        if own:
            await indexer.close()
