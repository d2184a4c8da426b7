from __future__ import annotations

from dataclasses import dataclass

WAD = 10**18
BASE_CURRENCY_UNIT = 10**8


@dataclass(frozen=True)
class ReservePosition:
    reserve: str
    scaled_variable_debt: int
    using_as_collateral: bool
    scaled_atoken_balance: int


@dataclass(frozen=True)
class UserPositions:
    user: str
    chain_id: int
    pool: str
    positions: tuple[ReservePosition, ...]


@dataclass(frozen=True)
class BadDebtPosition:
    user: str
    chain_id: int
    pool: str
    reserve: str
    scaled_variable_debt: int


@dataclass(frozen=True)
class StalePosition:
    user: str
    chain_id: int
    pool: str
    reserve: str


@dataclass(frozen=True)
class AccountData:
    """Decoded ``Pool.getUserAccountData``. Base amounts carry 8 decimals."""

    total_collateral_base: int
    total_debt_base: int
    available_borrows_base: int
    liquidation_threshold: int
    ltv: int
    health_factor: int

    @classmethod
    def from_call(cls, raw) -> "AccountData":
        return cls(*(int(v) for v in raw[:6]))


@dataclass(frozen=True)
class LiquidationBatch:
    debt_reserve: str
    collateral_reserve: str
    users: tuple[str, ...]


@dataclass(frozen=True)
class RepayBatch:
    reserve: str
    users: tuple[str, ...]
