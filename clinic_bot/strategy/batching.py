from __future__ import annotations

from clinic_bot.domain import BadDebtPosition, ReservePosition, UserPositions

# Per-item estimates are rough and err high.
LIQUIDATION_BASE_BUDGET = 500_000
LIQUIDATION_ITEM_BUDGET = 300_000
LIQUIDATION_BASE_GAS = 600_000
LIQUIDATION_ITEM_GAS = 350_000
REPAY_ITEM_BUDGET = 80_000


def block_gas_budget(gas_limit: int, pct: int = 40) -> int:
    return int(gas_limit) * int(pct) // 100


def max_liquidations_per_tx(budget: int) -> int:
    return max(1, (int(budget) - LIQUIDATION_BASE_BUDGET) // LIQUIDATION_ITEM_BUDGET)


def liquidation_gas(n_users: int) -> int:
    return LIQUIDATION_BASE_GAS + int(n_users) * LIQUIDATION_ITEM_GAS


def max_repayments_per_tx(budget: int) -> int:
    return max(1, int(budget) // REPAY_ITEM_BUDGET)


def repay_gas(budget: int) -> int:
    return int(budget) * 12 // 10


def pick_liquidation_pair(
    positions: tuple[ReservePosition, ...],
) -> tuple[str, str] | None:
    debt = next((p for p in positions if p.scaled_variable_debt > 0), None)
    collateral = next(
        (p for p in positions if p.using_as_collateral and p.scaled_atoken_balance > 0),
        None,
    )
    if debt is None or collateral is None:
        return None
    return debt.reserve, collateral.reserve


def group_liquidations(users: list[UserPositions]) -> dict[tuple[str, str], list[str]]:
    groups: dict[tuple[str, str], list[str]] = {}
    for u in users:
        pair = pick_liquidation_pair(u.positions)
        if pair is None:
            continue
        bucket = groups.setdefault(pair, [])
        if u.user not in bucket:
            bucket.append(u.user)
    return groups


def group_repayments(rows: list[BadDebtPosition], chain_id: int, pool: str) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = {}
    for r in rows:
        if r.chain_id != chain_id or r.pool.lower() != pool.lower():
            continue
        bucket = groups.setdefault(r.reserve, [])
        if r.user not in bucket:
            bucket.append(r.user)
    return groups


def chunk(users: list[str], size: int) -> list[list[str]]:
    size = max(1, int(size))
    return [list(users[i:i + size]) for i in range(0, len(users), size)]
