from . import liquidate, refresh, repay, stale_positions, status
from .base import JobContext, make_context

JOBS = {
    "liquidate": liquidate.run,
    "repay": repay.run,
    "status": status.run,
    "refresh": refresh.run,
    "stale": stale_positions.run,
}

__all__ = ["JOBS", "JobContext", "make_context"]
