"""Aave v3 pools the clinic bots operate on.

Pool addresses follow the Aave address book. ClinicSteward deployments are
configured per pool through ``CLINIC_STEWARD_<KEY>`` (e.g.
``CLINIC_STEWARD_ARBITRUM``); a pool without one is skipped by the jobs that
talk to the steward.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

MAINNET_CHAIN_ID = 1


@dataclass(frozen=True)
class PoolConfig:
    key: str
    chain_id: int
    chain_name: str
    pool: str
    tx_type: str
    gas_limit: int
    rpc_env: str
    alchemy_network: str | None
    public_rpcs: tuple[str, ...]
    poa: bool = False
    quicknode_network: str | None = None

    @property
    def is_mainnet(self) -> bool:
        return self.chain_id == MAINNET_CHAIN_ID


CHAIN_POOL_MAP: tuple[PoolConfig, ...] = (
    PoolConfig(
        key="linea",
        chain_id=59144,
        chain_name="Linea Mainnet",
        pool="0xc47b8C00b0f69a36fa203Ffeac0334874574a8Ac",
        tx_type="eip1559",
        gas_limit=30_000_000,
        rpc_env="RPC_LINEA",
        alchemy_network="linea-mainnet",
        quicknode_network="linea-mainnet",
        public_rpcs=("https://rpc.linea.build", "https://linea-rpc.publicnode.com"),
    ),
    PoolConfig(
        key="arbitrum",
        chain_id=42161,
        chain_name="Arbitrum One",
        pool="0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        tx_type="eip1559",
        gas_limit=32_000_000,
        rpc_env="RPC_ARBITRUM",
        alchemy_network="arb-mainnet",
        quicknode_network="arbitrum-mainnet",
        public_rpcs=("https://arb1.arbitrum.io/rpc", "https://arbitrum-one-rpc.publicnode.com"),
    ),
    PoolConfig(
        key="avalanche",
        chain_id=43114,
        chain_name="Avalanche",
        pool="0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        tx_type="eip1559",
        gas_limit=15_000_000,
        rpc_env="RPC_AVALANCHE",
        alchemy_network="avax-mainnet",
        quicknode_network="avalanche-mainnet",
        public_rpcs=(
            "https://api.avax.network/ext/bc/C/rpc",
            "https://avalanche-c-chain-rpc.publicnode.com",
        ),
        poa=True,
    ),
    PoolConfig(
        key="base",
        chain_id=8453,
        chain_name="Base",
        pool="0xA238Dd80C259a72e81d7e4664a9801593F98d1c5",
        tx_type="eip1559",
        gas_limit=116_000_000,
        rpc_env="RPC_BASE",
        alchemy_network="base-mainnet",
        quicknode_network="base-mainnet",
        public_rpcs=("https://mainnet.base.org", "https://base-rpc.publicnode.com"),
    ),
    PoolConfig(
        key="bnb",
        chain_id=56,
        chain_name="BNB Smart Chain",
        pool="0x6807dc923806fE8Fd134338EABCA509979a7e0cB",
        tx_type="eip1559",
        gas_limit=120_000_000,
        rpc_env="RPC_BNB",
        alchemy_network="bnb-mainnet",
        quicknode_network="bsc",
        public_rpcs=("https://bsc-dataseed.bnbchain.org", "https://bsc-rpc.publicnode.com"),
        poa=True,
    ),
    PoolConfig(
        key="gnosis",
        chain_id=100,
        chain_name="Gnosis",
        pool="0xb50201558B00496A145fE76f7424749556E326D8",
        tx_type="eip1559",
        gas_limit=17_000_000,
        rpc_env="RPC_GNOSIS",
        alchemy_network="gnosis-mainnet",
        quicknode_network="xdai",
        public_rpcs=("https://rpc.gnosischain.com", "https://gnosis-rpc.publicnode.com"),
        poa=True,
    ),
    PoolConfig(
        key="ethereum",
        chain_id=1,
        chain_name="Ethereum",
        pool="0x87870Bca3F3fD6335C3F4ce8392D69350B4fA4E2",
        tx_type="eip1559",
        gas_limit=34_000_000,
        rpc_env="RPC_MAINNET",
        alchemy_network="eth-mainnet",
        quicknode_network="",
        public_rpcs=("https://ethereum-rpc.publicnode.com", "https://eth.drpc.org"),
    ),
    PoolConfig(
        key="ethereum_lido",
        chain_id=1,
        chain_name="Ethereum",
        pool="0x4e033931ad43597d96D6bcc25c280717730B58B1",
        tx_type="eip1559",
        gas_limit=34_000_000,
        rpc_env="RPC_MAINNET",
        alchemy_network="eth-mainnet",
        quicknode_network="",
        public_rpcs=("https://ethereum-rpc.publicnode.com", "https://eth.drpc.org"),
    ),
    PoolConfig(
        key="metis",
        chain_id=1088,
        chain_name="Metis Andromeda Mainnet",
        pool="0x90df02551bB792286e8D4f13E0e357b4Bf1D6a57",
        tx_type="legacy",
        gas_limit=30_000_000,
        rpc_env="RPC_METIS",
        alchemy_network="metis-mainnet",
        public_rpcs=("https://andromeda.metis.io/?owner=1088", "https://metis-rpc.publicnode.com"),
    ),
    PoolConfig(
        key="polygon",
        chain_id=137,
        chain_name="Polygon",
        pool="0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        tx_type="eip1559",
        gas_limit=30_000_000,
        rpc_env="RPC_POLYGON",
        alchemy_network="polygon-mainnet",
        quicknode_network="matic",
        public_rpcs=(
            "https://polygon-bor-rpc.publicnode.com",
            "https://polygon-rpc.com",
            "https://polygon.drpc.org",
        ),
        poa=True,
    ),
    PoolConfig(
        key="optimism",
        chain_id=10,
        chain_name="OP Mainnet",
        pool="0x794a61358D6845594F94dc1DB02A252b5b4814aD",
        tx_type="eip1559",
        gas_limit=60_000_000,
        rpc_env="RPC_OPTIMISM",
        alchemy_network="opt-mainnet",
        quicknode_network="optimism",
        public_rpcs=("https://mainnet.optimism.io", "https://optimism-rpc.publicnode.com"),
    ),
    PoolConfig(
        key="zksync",
        chain_id=324,
        chain_name="ZKsync Era",
        pool="0x78e30497a3c7527d953c6B1E3541b021A98Ac43c",
        tx_type="eip1559",
        gas_limit=5_000_000,
        rpc_env="RPC_ZKSYNC",
        alchemy_network="zksync-mainnet",
        quicknode_network="zksync-mainnet",
        public_rpcs=("https://mainnet.era.zksync.io",),
    ),
    PoolConfig(
        key="scroll",
        chain_id=534352,
        chain_name="Scroll",
        pool="0x11fCfe756c05AD438e312a7fd934381537D3cFfe",
        tx_type="eip1559",
        gas_limit=5_000_000,
        rpc_env="RPC_SCROLL",
        alchemy_network="scroll-mainnet",
        quicknode_network="scroll-mainnet",
        public_rpcs=("https://rpc.scroll.io", "https://scroll-rpc.publicnode.com"),
    ),
)


def select_pools(keys: tuple[str, ...] | list[str] = ()) -> list[PoolConfig]:
    if not keys:
        return list(CHAIN_POOL_MAP)
    known = {p.key for p in CHAIN_POOL_MAP}
    wanted = {k.strip().lower() for k in keys if k.strip()}
    unknown = sorted(wanted - known)
    if unknown:
        raise ValueError(f"unknown pool key(s): {', '.join(unknown)} (known: {', '.join(sorted(known))})")
    return [p for p in CHAIN_POOL_MAP if p.key in wanted]


def steward_address(pool: PoolConfig) -> str | None:
    raw = os.environ.get(f"CLINIC_STEWARD_{pool.key.upper()}", "").strip()
    return raw or None


def quicknode_url(pool: PoolConfig, token: str, endpoint: str) -> str | None:
    if not token or not endpoint or pool.quicknode_network is None:
        return None
    host = f"{endpoint}.{pool.quicknode_network}" if pool.quicknode_network else endpoint
    suffix = "ext/bc/C/rpc/" if pool.key == "avalanche" else ""
    return f"https://{host}.quiknode.pro/{token}/{suffix}"


def rpc_urls(
    pool: PoolConfig,
    alchemy_key: str = "",
    quicknode_token: str = "",
    quicknode_endpoint: str = "",
) -> list[str]:
    """Env override first, then the keyed providers, then public endpoints."""
    urls: list[str] = []
    override = os.environ.get(pool.rpc_env, "").strip()
    if override:
        urls.append(override)
    if alchemy_key and pool.alchemy_network:
        urls.append(f"https://{pool.alchemy_network}.g.alchemy.com/v2/{alchemy_key}")
    quicknode = quicknode_url(pool, quicknode_token, quicknode_endpoint)
    if quicknode:
        urls.append(quicknode)
    for url in pool.public_rpcs:
        if url not in urls:
            urls.append(url)
    return urls
