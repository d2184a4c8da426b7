import asyncio
import dataclasses
import logging

from web3 import Web3

from clinic_bot.domain import WAD, BadDebtPosition, ReservePosition, UserPositions
from clinic_bot.jobs import liquidate, refresh, repay, stale_positions, status
from clinic_bot.jobs.liquidate import liquidate_pool
from clinic_bot.jobs.refresh import refresh_payloads
from clinic_bot.jobs.repay import repay_pool
from clinic_bot.jobs.stale_positions import correct_pool, dust_amount
from conftest import BOT, FakeContract, FakeIndexer, FakeOperator, addr

USDC, WETH, DAI = addr(0xA1), addr(0xA2), addr(0xA3)
A, B, C, D = addr(1), addr(2), addr(3), addr(4)
cs = Web3.to_checksum_address


def _acct(collateral=100, debt=100, hf=WAD // 2):
    return (collateral, debt, 0, 8_000, 7_500, hf)


def _hf_user(user, debt, collateral, pool):
    return UserPositions(
        user=user,
        chain_id=42161,
        pool=pool,
        positions=(
            ReservePosition(debt, 10, False, 0),
            ReservePosition(collateral, 0, True, 10),
        ),
    )


def _account_pool(accounts):
    return FakeContract(getUserAccountData=lambda u: accounts[u.lower()])


def test_liquidate_pool_batches_unhealthy_users(ctx, pool_cfg) -> None:
    accounts = {A: _acct(), B: _acct(hf=WAD * 2), C: _acct(), D: _acct(collateral=0)}
    indexer = FakeIndexer(users=[
        _hf_user(A, USDC, WETH, pool_cfg.pool),
        _hf_user(B, USDC, WETH, pool_cfg.pool),
        _hf_user(C, DAI, WETH, pool_cfg.pool),
        _hf_user(D, DAI, WETH, pool_cfg.pool),
    ])
    steward = FakeContract(batchLiquidate=None)
    operator = FakeOperator(pool_cfg, pool=_account_pool(accounts), steward=steward)

    results = asyncio.run(liquidate_pool(ctx, operator, "0xsteward", indexer))

    assert [r.reason for r in results] == ["dry_run", "dry_run"]
    assert operator.steward_address == "0xsteward"
    assert indexer.hf_requests == [(42161, pool_cfg.pool, 1, 10_000)]
    first, second = steward.called("batchLiquidate")
    assert first.args == (cs(USDC), cs(WETH), [cs(A)], True)
    assert second.args == (cs(DAI), cs(WETH), [cs(C)], True)
    assert first.tx["gas"] == 600_000 + 350_000


def test_liquidate_pool_chunks_and_continues_after_failed_simulation(ctx, pool_cfg) -> None:
    # 2% of 32M leaves room for a single liquidation per tx
    ctx.settings = dataclasses.replace(ctx.settings, gas_budget_pct=2)
    accounts = {A: _acct(), B: _acct(), C: _acct()}
    indexer = FakeIndexer(users=[_hf_user(u, USDC, WETH, pool_cfg.pool) for u in (A, B, C)])

    def _liquidate(debt, collateral, users, use_atokens):
        return RuntimeError("reverted") if users == [cs(B)] else None

    steward = FakeContract(batchLiquidate=_liquidate)
    operator = FakeOperator(pool_cfg, pool=_account_pool(accounts), steward=steward)

    results = asyncio.run(liquidate_pool(ctx, operator, "0xsteward", indexer))

    assert [r.reason for r in results] == ["dry_run", "simulation_failed", "dry_run"]
    assert [c.args[2] for c in steward.called("batchLiquidate")] == [[cs(A)], [cs(B)], [cs(C)]]


def test_repay_pool_skips_users_with_collateral(ctx, pool_cfg) -> None:
    accounts = {A: _acct(collateral=0, hf=0), B: _acct(hf=WAD), C: _acct(collateral=0, hf=0)}
    rows = [
        BadDebtPosition(A, 42161, pool_cfg.pool.lower(), USDC, 5),
        BadDebtPosition(B, 42161, pool_cfg.pool, USDC, 5),
        BadDebtPosition(C, 42161, pool_cfg.pool, WETH, 5),
        BadDebtPosition(D, 10, pool_cfg.pool, USDC, 5),
    ]
    steward = FakeContract(batchRepayBadDebt=None)
    operator = FakeOperator(pool_cfg, pool=_account_pool(accounts), steward=steward)

    results = asyncio.run(repay_pool(ctx, operator, "0xsteward", rows))

    assert [r.reason for r in results] == ["dry_run", "dry_run"]
    usdc, weth = steward.called("batchRepayBadDebt")
    assert usdc.args == (cs(USDC), [cs(A)], True)
    assert weth.args == (cs(WETH), [cs(C)], True)
    # 40% of 32M plus 20% headroom
    assert usdc.tx["gas"] == 15_360_000


def test_repay_pool_without_rows(ctx, pool_cfg) -> None:
    operator = FakeOperator(pool_cfg, pool=_account_pool({}), steward=FakeContract())
    assert asyncio.run(repay_pool(ctx, operator, "0xsteward", [])) == []


def test_liquidate_run_skips_pools_without_steward(ctx, monkeypatch) -> None:
    ctx.settings = dataclasses.replace(ctx.settings, chains=("arbitrum", "base", "optimism"))
    monkeypatch.setenv("CLINIC_STEWARD_ARBITRUM", "0xsteward-arb")
    monkeypatch.setenv("CLINIC_STEWARD_OPTIMISM", "0xsteward-op")
    monkeypatch.delenv("CLINIC_STEWARD_BASE", raising=False)
    connected = []

    async def fake_connect(pool_cfg):
        connected.append(pool_cfg.key)
        if pool_cfg.key == "optimism":
            raise RuntimeError("no working RPC")
        return FakeOperator(pool_cfg, pool=_account_pool({}), steward=FakeContract())

    monkeypatch.setattr(ctx, "connect", fake_connect)
    out = asyncio.run(liquidate.run(ctx, FakeIndexer()))
    assert connected == ["arbitrum", "optimism"]
    assert out == {"arbitrum": []}


def test_repay_run_fetches_bad_debt_once(ctx, monkeypatch, pool_cfg) -> None:
    ctx.settings = dataclasses.replace(ctx.settings, chains=("arbitrum",))
    monkeypatch.setenv("CLINIC_STEWARD_ARBITRUM", "0xsteward")
    steward = FakeContract(batchRepayBadDebt=None)
    accounts = {A: _acct(collateral=0, hf=0)}

    async def fake_connect(cfg):
        return FakeOperator(cfg, pool=_account_pool(accounts), steward=steward)

    monkeypatch.setattr(ctx, "connect", fake_connect)
    indexer = FakeIndexer(bad_debt=[BadDebtPosition(A, 42161, pool_cfg.pool, USDC, 1)])
    out = asyncio.run(repay.run(ctx, indexer))
    assert [r.reason for r in out["arbitrum"]] == ["dry_run"]


def test_status_reads_budget(ctx, monkeypatch, caplog) -> None:
    caplog.set_level(logging.INFO, logger="clinic-bot-test")
    ctx.settings = dataclasses.replace(ctx.settings, chains=("arbitrum", "base"))
    monkeypatch.setenv("CLINIC_STEWARD_ARBITRUM", "0xsteward-arb")
    monkeypatch.setenv("CLINIC_STEWARD_BASE", "0xsteward-base")

    async def fake_connect(pool_cfg):
        if pool_cfg.key == "base":
            raise RuntimeError("rpc down")
        return FakeOperator(pool_cfg, steward=FakeContract(availableBudget=1_234 * 10**8 + 5))

    monkeypatch.setattr(ctx, "connect", fake_connect)
    out = asyncio.run(status.run(ctx))
    assert out == {"arbitrum": 1_234 * 10**8 + 5}
    lines = [r.getMessage() for r in caplog.records if r.name == "clinic-bot-test" and r.levelno == logging.INFO]
    assert lines == ["Arbitrum One 1234"]


def test_refresh_groups_by_chain() -> None:
    rows = [
        BadDebtPosition(A, 1, "0xp", USDC, 1),
        BadDebtPosition(B, 10, "0xp", USDC, 1),
        BadDebtPosition(A, 1, "0xq", WETH, 1),
        BadDebtPosition(C, 1, "0xp", USDC, 1),
    ]
    assert refresh_payloads(rows) == {1: [A, C], 10: [B]}


def test_refresh_run_continues_after_failed_update(ctx) -> None:
    indexer = FakeIndexer(
        bad_debt=[BadDebtPosition(A, 1, "0xp", USDC, 1), BadDebtPosition(B, 10, "0xp", USDC, 1)],
        fail_chains={1},
    )
    out = asyncio.run(refresh.run(ctx, indexer))
    assert out == {10: 1}
    assert indexer.updates == [(10, [B])]


def test_dust_amount() -> None:
    # 18 decimals at 3000 USD
    assert dust_amount(3_000 * 10**8, 18) == 2 * 10**18 // (3_000 * 10**8)
    # never rounds down to nothing
    assert dust_amount(10**8, 6) == 1


ATOKEN = addr(0xA70)


def _stale_operator(pool_cfg, bot_balance):
    configs = {
        A: 1 << 3,  # collateral bit of reserve 1
        B: 0,
        C: 1 << 3,
    }
    balances = {A: 0, B: 0, C: 5, BOT.lower(): bot_balance}
    pool = FakeContract(
        getReservesList=[cs(USDC), cs(WETH)],
        getReserveAToken=ATOKEN,
        getUserConfiguration=lambda u: (configs[u.lower()],),
    )
    token = FakeContract(
        balanceOf=lambda u: balances[u.lower()],
        symbol="aArbWETH",
        decimals=18,
        transfer=True,
    )
    oracle = FakeContract(getAssetPrice=3_000 * 10**8)
    return FakeOperator(pool_cfg, pool=pool, tokens={ATOKEN: token}, oracle=oracle), token


def test_correct_pool_sends_dust_to_stale_users(ctx, pool_cfg) -> None:
    operator, token = _stale_operator(pool_cfg, bot_balance=10**18)
    reserves = {WETH: [A, B, C], DAI: [D]}

    results = asyncio.run(correct_pool(ctx, operator, reserves))

    assert [r.reason for r in results] == ["dry_run"]
    (transfer,) = token.called("transfer")
    assert transfer.args == (cs(A), dust_amount(3_000 * 10**8, 18))
    assert transfer.tx == {"from": BOT, "gas": 200_000}


def test_correct_pool_insufficient_balance(ctx, pool_cfg) -> None:
    operator, token = _stale_operator(pool_cfg, bot_balance=1)
    results = asyncio.run(correct_pool(ctx, operator, {WETH: [A]}))
    assert results == []
    assert token.called("transfer") == []


def test_stale_run_reads_csv(ctx, monkeypatch, pool_cfg, tmp_path) -> None:
    path = tmp_path / "rows.csv"
    path.write_text(
        "user,chain_id,pool,reserve\n"
        f"{A},42161,{pool_cfg.pool},{WETH}\n"
        f"{B},8453,0x0000000000000000000000000000000000000bad,{WETH}\n"
    )
    operator, token = _stale_operator(pool_cfg, bot_balance=10**18)
    connected = []

    async def fake_connect(cfg):
        connected.append(cfg.key)
        return operator

    monkeypatch.setattr(ctx, "connect", fake_connect)
    out = asyncio.run(stale_positions.run(ctx, str(path)))
    assert connected == ["arbitrum"]
    assert [r.reason for r in out["arbitrum"]] == ["dry_run"]
