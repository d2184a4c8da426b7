from __future__ import annotations

import logging
from typing import Any

import aiohttp

from clinic_bot.domain import BadDebtPosition, ReservePosition, UserPositions
from clinic_bot.infra import get_logger


def _as_int(raw: Any) -> int:
    if raw is None or raw == "":
        return 0
    return int(raw)


def parse_user_positions(payload: dict) -> list[UserPositions]:
    """Rows of ``hfWithPositions`` from ``/healthFactor/get``."""
    rows = payload.get("hfWithPositions") or []
    out = []
    for row in rows:
        positions = tuple(
            ReservePosition(
                reserve=p["reserve"],
                scaled_variable_debt=_as_int(p.get("scaledVariableDebt")),
                using_as_collateral=bool(p.get("usingAsCollateral")),
                scaled_atoken_balance=_as_int(p.get("scaledATokenBalance")),
            )
            for p in row.get("positions") or []
        )
        out.append(
            UserPositions(
                user=row["user"],
                chain_id=int(row.get("chainId", 0) or 0),
                pool=row.get("pool", ""),
                positions=positions,
            )
        )
    return out


def parse_bad_debt(rows: list) -> list[BadDebtPosition]:
    if not isinstance(rows, list):
        raise RuntimeError(f"unexpected bad debt response type: {type(rows).__name__}")
    return [
        BadDebtPosition(
            user=r["user"],
            chain_id=int(r["chain_id"]),
            pool=r["pool"],
            reserve=r["reserve"],
            scaled_variable_debt=_as_int(r.get("scaled_variable_debt")),
        )
        for r in rows
    ]


class IndexerClient:
    """Thin client for the position indexer. One attempt per request, errors propagate."""

    def __init__(
        self, base_url: str, *, timeout: float = 30.0, log: logging.Logger | None = None
    ):
        self.base_url = base_url.rstrip("/")
        self.log = log or get_logger("clinic-bot")
        self._timeout = aiohttp.ClientTimeout(total=max(1.0, float(timeout)))
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "IndexerClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def _ensure_session(self) -> None:
        if self._session is not None and not self._session.closed:
            return
        self._session = aiohttp.ClientSession(
            timeout=self._timeout,
            headers={"User-Agent": "clinic-bot/1.0"},
        )

    async def _request(self, method: str, path: str, **kwargs):
        await self._ensure_session()
        assert self._session is not None
        url = f"{self.base_url}{path}"
        async with self._session.request(method, url, **kwargs) as r:
            if r.status >= 400:
                raise RuntimeError(f"http {r.status} {method} {url}")
            return await r.json(content_type=None)

    async def health_factors(
        self, chain_id: int, pool: str, *, page: int = 1, page_size: int = 10_000
    ) -> list[UserPositions]:
        payload = await self._request(
            "GET",
            "/healthFactor/get",
            params={
                "chainId": str(chain_id),
                "pool": pool,
                "page": str(page),
                "pageSize": str(page_size),
            },
        )
        payload = payload or {}
        total = int(payload.get("hfCount") or 0)
        if total > page_size:
            self.log.warning(
                "indexer has %d positions for chain %s pool %s, only the first %d were fetched",
                total, chain_id, pool, page_size,
            )
        return parse_user_positions(payload)

    async def bad_debt(self) -> list[BadDebtPosition]:
        return parse_bad_debt(await self._request("GET", "/baddebt/get"))

    async def update_positions(self, chain_id: int, users: list[str]):
        return await self._request(
            "POST",
            "/positions/update",
            json={"chainId": int(chain_id), "users": list(users)},
        )
