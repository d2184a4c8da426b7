"""Stale position corrector.

Some users end up with the collateral bit set for a reserve while holding no
aToken of it, which the indexer keeps reporting as a position. Sending each
of them a dust amount of the aToken makes the on-chain state consistent again.
"""

from __future__ import annotations

from decimal import Decimal

from clinic_bot.data import group_stale_positions, read_stale_positions
from clinic_bot.execution import ExecutionResult
from clinic_bot.infra import gather_bounded, run_blocking
from clinic_bot.jobs.base import JobContext, checksum, run_per_pool
from clinic_bot.onchain import Operator, config_data, is_using_as_collateral
from clinic_bot.strategy import stale_collateral_gate

TRANSFER_GAS = 200_000
TRANSFER_CONFIRMATIONS = 2


def dust_amount(price: int, decimals: int, numerator: int = 2) -> int:
    if int(price) <= 0:
        raise ValueError(f"invalid oracle price {price}")
    return max(1, int(numerator) * 10 ** int(decimals) // int(price))


async def _stale_users(operator: Operator, token, reserve_id: int, users: list[str], limit: int, log) -> list[str]:
    pool = operator.pool()

    def _read(user: str):
        cfg = config_data(pool.functions.getUserConfiguration(checksum(user)).call())
        balance = token.functions.balanceOf(checksum(user)).call()
        return cfg, balance

    coros = [run_blocking(lambda u=u: _read(u)) for u in users]
    out = []
    for user, res in zip(users, await gather_bounded(coros, limit)):
        if isinstance(res, Exception):
            log.warning("reading %s failed: %s", user, res)
            continue
        cfg, balance = res
        ok, reason = stale_collateral_gate(is_using_as_collateral(cfg, reserve_id), balance)
        if ok:
            out.append(user)
        else:
            log.debug("skip %s: %s", user, reason)
    return out


async def correct_pool(
    ctx: JobContext, operator: Operator, reserves: dict[str, list[str]]
) -> list[ExecutionResult]:
    cfg = operator.pool_cfg
    log = ctx.log
    pool = operator.pool()
    reserves_list = [r.lower() for r in await run_blocking(lambda: pool.functions.getReservesList().call())]
    oracle = await run_blocking(operator.oracle)
    executor = ctx.executor(operator)
    results: list[ExecutionResult] = []

    for reserve, users in reserves.items():
        if reserve.lower() not in reserves_list:
            log.warning("[stale] %s: reserve %s not listed in pool", cfg.key, reserve)
            continue
        reserve_id = reserves_list.index(reserve.lower())
        a_token_addr = await run_blocking(lambda: pool.functions.getReserveAToken(checksum(reserve)).call())
        token = operator.erc20(a_token_addr)

        stale = await _stale_users(operator, token, reserve_id, users, ctx.settings.read_concurrency, log)
        if not stale:
            continue
        symbol = await run_blocking(lambda: token.functions.symbol().call())
        decimals = int(await run_blocking(lambda: token.functions.decimals().call()))
        price = int(await run_blocking(lambda: oracle.functions.getAssetPrice(checksum(reserve)).call()))
        dust = dust_amount(price, decimals, ctx.settings.stale_dust_numerator)
        total = dust * len(stale)
        log.info(
            "ChainId: %s, Reserve: %s, Users: %d, Amount: %d, Total: %s",
            cfg.chain_id, symbol, len(stale), dust, Decimal(total) / (Decimal(10) ** decimals),
        )

        bot_balance = int(await run_blocking(lambda: token.functions.balanceOf(checksum(operator.sender)).call()))
        if bot_balance < total:
            log.warning("insufficient balance %s %d", symbol, len(stale))
            continue

        for user in stale:
            call = token.functions.transfer(checksum(user), dust)
            results.append(
                await executor.execute(
                    call,
                    gas=TRANSFER_GAS,
                    label=f"transfer {symbol} {dust} -> {user} on {cfg.key}",
                    confirmations=TRANSFER_CONFIRMATIONS,
                    sim_from=operator.sender,
                )
            )
    return results


async def run(ctx: JobContext, csv_path: str | None = None) -> dict:
    path = csv_path or ctx.settings.stale_positions_csv
    grouped = group_stale_positions(read_stale_positions(path))
    ctx.log.info("[stale] %s: %d chains with stale positions", path, len(grouped))

    pools = [p for p in ctx.pools() if grouped.get(p.chain_id, {}).get(p.pool.lower())]
    return await run_per_pool(
        ctx,
        "stale",
        lambda operator, _steward: correct_pool(
            ctx, operator, grouped[operator.pool_cfg.chain_id][operator.pool_cfg.pool.lower()]
        ),
        needs_steward=False,
        pools=pools,
    )
