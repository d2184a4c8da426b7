from __future__ import annotations

import logging

import pytest
from aiohttp import web
from web3 import Web3

from clinic_bot.config import CHAIN_POOL_MAP, Settings
from clinic_bot.infra import RuntimeEventLogger
from clinic_bot.jobs.base import JobContext

BOT = "0x3Cbded22F878aFC8d39dCD744d3Fe62086B76193"


def addr(n: int) -> str:
    return "0x" + f"{n:040x}"


class FakeCall:
    def __init__(self, name, args, result):
        self.name = name
        self.args = args
        self.result = result
        self.tx = None

    def call(self, tx=None):
        self.tx = tx
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def build_transaction(self, params):
        self.built = dict(params)
        return {
            "to": Web3.to_checksum_address(addr(0xC11)), "data": "0x", "value": 0,
            "maxFeePerGas": 2 * 10**9, "maxPriorityFeePerGas": 10**9,
            **params,
        }


class FakeFunctions:
    def __init__(self, handlers, calls):
        self._handlers = handlers
        self._calls = calls

    def __getattr__(self, name):
        handler = self._handlers[name]

        def _bind(*args):
            res = handler(*args) if callable(handler) else handler
            c = FakeCall(name, args, res)
            self._calls.append(c)
            return c

        return _bind


class FakeContract:
    """Stands in for a web3 contract: ``functions.<name>(*args).call()``."""

    def __init__(self, **handlers):
        self.calls: list[FakeCall] = []
        self.functions = FakeFunctions(handlers, self.calls)

    def called(self, name):
        return [c for c in self.calls if c.name == name]


class FakeOperator:
    def __init__(self, pool_cfg, *, pool=None, steward=None, tokens=None, oracle=None):
        self.pool_cfg = pool_cfg
        self.bot_address = BOT
        self.sender = BOT
        self.account = None
        self.w3 = None
        self._pool = pool
        self._steward = steward
        self._tokens = tokens or {}
        self._oracle = oracle
        self.steward_address = None

    def pool(self):
        return self._pool

    def steward(self, address):
        self.steward_address = address
        return self._steward

    def erc20(self, address):
        return self._tokens[address]

    def oracle(self):
        return self._oracle


class FakeIndexer:
    def __init__(self, users=None, bad_debt=None, fail_chains=()):
        self.users = users or []
        self.rows = bad_debt or []
        self.fail_chains = set(fail_chains)
        self.updates = []
        self.hf_requests = []

    async def health_factors(self, chain_id, pool, *, page=1, page_size=10_000):
        self.hf_requests.append((chain_id, pool, page, page_size))
        return self.users

    async def bad_debt(self):
        return self.rows

    async def update_positions(self, chain_id, users):
        if chain_id in self.fail_chains:
            raise RuntimeError(f"http 500 POST chain {chain_id}")
        self.updates.append((chain_id, list(users)))
        return {"ok": True}

    async def close(self):
        pass


def make_settings(**overrides) -> Settings:
    values = dict(
        private_key="",
        bot_address=BOT,
        api_url="https://api.onaave.com",
        relay_url="https://relay.flashbots.net",
        dry_run=True,
        log_level="DEBUG",
        data_dir="",
        chains=(),
        gas_budget_pct=40,
        confirmations=5,
        private_tx_blocks=100,
        read_concurrency=4,
        http_timeout=5.0,
        receipt_timeout=30.0,
        hf_page_size=10_000,
        alchemy_key="",
        quicknode_token="",
        quicknode_endpoint="",
        stale_positions_csv="positions.csv",
        stale_dust_numerator=2,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def pool_cfg():
    return next(p for p in CHAIN_POOL_MAP if p.key == "arbitrum")


@pytest.fixture
def events(tmp_path):
    return RuntimeEventLogger(str(tmp_path))


@pytest.fixture
def ctx(events):
    return JobContext(
        settings=make_settings(),
        log=logging.getLogger("clinic-bot-test"),
        events=events,
        relay=None,
    )


async def serve(app: web.Application) -> tuple[web.AppRunner, str]:
    """Start ``app`` on an ephemeral localhost port."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    return runner, f"http://{host}:{port}"
