from .manager import ExecutionManager, ExecutionResult

__all__ = ["ExecutionManager", "ExecutionResult"]
