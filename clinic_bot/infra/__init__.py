from .log import get_logger
from .telemetry import RuntimeEventLogger
from .aio import gather_bounded, run_blocking

__all__ = ["get_logger", "RuntimeEventLogger", "gather_bounded", "run_blocking"]
