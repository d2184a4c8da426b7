from __future__ import annotations

from clinic_bot.domain import WAD, AccountData


def liquidation_gate(account: AccountData) -> tuple[bool, str]:
    # dust positions are not worth the gas
    if account.total_collateral_base == 0:
        return False, "no_collateral"
    if account.total_debt_base == 0:
        return False, "no_debt"
    if account.health_factor > WAD:
        return False, "healthy"
    return True, "ok"


def bad_debt_gate(account: AccountData) -> tuple[bool, str]:
    # pure bad debt has no collateral left, which the pool reports as hf == 0
    if account.health_factor > 0:
        return False, "not_pure_bad_debt"
    return True, "ok"


def stale_collateral_gate(collateral_flag: bool, atoken_balance: int) -> tuple[bool, str]:
    if not collateral_flag:
        return False, "flag_not_set"
    if int(atoken_balance) != 0:
        return False, "has_balance"
    return True, "ok"
