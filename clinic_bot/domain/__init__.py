from .models import (
    BASE_CURRENCY_UNIT,
    WAD,
    AccountData,
    BadDebtPosition,
    LiquidationBatch,
    RepayBatch,
    ReservePosition,
    StalePosition,
    UserPositions,
)

__all__ = [
    "BASE_CURRENCY_UNIT",
    "WAD",
    "AccountData",
    "BadDebtPosition",
    "LiquidationBatch",
    "RepayBatch",
    "ReservePosition",
    "StalePosition",
    "UserPositions",
]
