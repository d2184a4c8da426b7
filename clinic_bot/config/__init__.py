from .settings import Settings, load_settings
from .chains import CHAIN_POOL_MAP, PoolConfig, rpc_urls, select_pools, steward_address

__all__ = [
    "Settings",
    "load_settings",
    "CHAIN_POOL_MAP",
    "PoolConfig",
    "rpc_urls",
    "select_pools",
    "steward_address",
]
