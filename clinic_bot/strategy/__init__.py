from .batching import (
    block_gas_budget,
    chunk,
    group_liquidations,
    group_repayments,
    liquidation_gas,
    max_liquidations_per_tx,
    max_repayments_per_tx,
    pick_liquidation_pair,
    repay_gas,
)
from .gates import bad_debt_gate, liquidation_gate, stale_collateral_gate

__all__ = [
    "block_gas_budget",
    "chunk",
    "group_liquidations",
    "group_repayments",
    "liquidation_gas",
    "max_liquidations_per_tx",
    "max_repayments_per_tx",
    "pick_liquidation_pair",
    "repay_gas",
    "bad_debt_gate",
    "liquidation_gate",
    "stale_collateral_gate",
]
