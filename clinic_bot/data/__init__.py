from .indexer import IndexerClient, parse_bad_debt, parse_user_positions
from .stale_csv import group_stale_positions, read_stale_positions

__all__ = [
    "IndexerClient",
    "parse_bad_debt",
    "parse_user_positions",
    "group_stale_positions",
    "read_stale_positions",
]
