"""Bad debt repayment batcher.

1. fetches bad debt positions from the indexer
2. checks on-chain that every position is pure bad debt
3. groups users by reserve into gas-bounded batches
4. simulates, then executes ``batchRepayBadDebt`` on the ClinicSteward
"""

from __future__ import annotations

from clinic_bot.data import IndexerClient
from clinic_bot.domain import BadDebtPosition
from clinic_bot.execution import ExecutionResult
from clinic_bot.jobs.base import JobContext, checksum, read_account_data, run_per_pool
from clinic_bot.onchain import Operator
from clinic_bot.strategy import (
    bad_debt_gate,
    block_gas_budget,
    chunk,
    group_repayments,
    max_repayments_per_tx,
    repay_gas,
)


async def repay_pool(
    ctx: JobContext, operator: Operator, steward_addr: str, rows: list[BadDebtPosition]
) -> list[ExecutionResult]:
    cfg = operator.pool_cfg
    log = ctx.log
    candidates = group_repayments(rows, cfg.chain_id, cfg.pool)
    users = list(dict.fromkeys(u for reserve_users in candidates.values() for u in reserve_users))
    if not users:
        log.info("[repay] %s: no bad debt", cfg.key)
        return []

    accounts = await read_account_data(operator, users, limit=ctx.settings.read_concurrency, log=log)
    valid = set()
    for user in users:
        account = accounts.get(user)
        if account is None:
            continue
        ok, _reason = bad_debt_gate(account)
        if ok:
            valid.add(user)
        else:
            log.info("api error %s has no pure bad debt", user)

    budget = block_gas_budget(cfg.gas_limit, ctx.settings.gas_budget_pct)
    per_tx = max_repayments_per_tx(budget)
    gas = repay_gas(budget)
    steward = operator.steward(steward_addr)
    executor = ctx.executor(operator)
    results: list[ExecutionResult] = []
    for reserve, reserve_users in candidates.items():
        batch = [u for u in reserve_users if u in valid]
        if not batch:
            continue
        chunks = chunk(batch, per_tx)
        if len(chunks) > 1:
            log.info(
                "chunking %d repayments into %d batches of at most %d",
                len(batch), len(chunks), per_tx,
            )
        for users_chunk in chunks:
            log.info("repaying bad debt of %d users in reserve %s on %s", len(users_chunk), reserve, cfg.key)
            call = steward.functions.batchRepayBadDebt(
                checksum(reserve),
                [checksum(u) for u in users_chunk],
                True,
            )
            results.append(
                await executor.execute(
                    call,
                    gas=gas,
                    label=f"batchRepayBadDebt {cfg.key} {reserve} x{len(users_chunk)}",
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
        rows = await indexer.bad_debt()
        ctx.log.info("[repay] %d bad debt positions from indexer", len(rows))
        return await run_per_pool(
            ctx,
            "repay",
            lambda operator, steward: repay_pool(ctx, operator, steward, rows),
        )
    finally:
        if own:
            await indexer.close()
