from __future__ import annotations

import logging
from dataclasses import dataclass

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from clinic_bot.config import PoolConfig, Settings, rpc_urls
from clinic_bot.onchain.abis import (
    ADDRESSES_PROVIDER_ABI,
    CLINIC_STEWARD_ABI,
    ERC20_ABI,
    ORACLE_ABI,
    POOL_ABI,
)


@dataclass
class Operator:
    """Connected web3 client plus signing account for one pool."""

    pool_cfg: PoolConfig
    w3: Web3
    account: LocalAccount | None
    bot_address: str
    rpc_url: str

    @property
    def sender(self) -> str:
        if self.account is not None:
            return self.account.address
        return self.bot_address

    def _contract(self, address: str, abi: list):
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def pool(self):
        return self._contract(self.pool_cfg.pool, POOL_ABI)

    def steward(self, address: str):
        return self._contract(address, CLINIC_STEWARD_ABI)

    def erc20(self, address: str):
        return self._contract(address, ERC20_ABI)

    def oracle(self):
        provider = self.pool().functions.ADDRESSES_PROVIDER().call()
        oracle_addr = self._contract(provider, ADDRESSES_PROVIDER_ABI).functions.getPriceOracle().call()
        return self._contract(oracle_addr, ORACLE_ABI)


def _short(url: str) -> str:
    # keep api keys out of logs
    if "/v2/" in url:
        return url.split("/v2/")[0]
    if ".quiknode.pro/" in url:
        return url.split(".quiknode.pro/")[0] + ".quiknode.pro"
    return url


def connect(pool_cfg: PoolConfig, settings: Settings, log: logging.Logger) -> Operator:
    w3 = None
    used = ""
    for rpc in rpc_urls(
        pool_cfg, settings.alchemy_key, settings.quicknode_token, settings.quicknode_endpoint
    ):
        try:
            candidate = Web3(Web3.HTTPProvider(rpc, request_kwargs={"timeout": 20}))
            if pool_cfg.poa:
                candidate.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
            chain_id = candidate.eth.chain_id
            if chain_id != pool_cfg.chain_id:
                log.warning("[RPC] %s reports chain %s, expected %s", _short(rpc), chain_id, pool_cfg.chain_id)
                continue
            w3, used = candidate, rpc
            break
        except Exception as e:
            log.warning("[RPC] %s: %s", _short(rpc), e)
    if w3 is None:
        raise RuntimeError(f"no working RPC for {pool_cfg.chain_name} ({pool_cfg.key})")
    log.debug("[RPC] %s connected via %s", pool_cfg.key, _short(used))

    account = Account.from_key(settings.private_key) if settings.private_key else None
    bot_address = Web3.to_checksum_address(settings.bot_address)
    if account is not None and account.address.lower() != bot_address.lower():
        log.warning("operator %s differs from bot address %s", account.address, bot_address)
    return Operator(pool_cfg=pool_cfg, w3=w3, account=account, bot_address=bot_address, rpc_url=used)
