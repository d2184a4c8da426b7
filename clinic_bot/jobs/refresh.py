from __future__ import annotations

from clinic_bot.data import IndexerClient
from clinic_bot.domain import BadDebtPosition
from clinic_bot.jobs.base import JobContext


def refresh_payloads(rows: list[BadDebtPosition]) -> dict[int, list[str]]:
    out: dict[int, list[str]] = {}
    for r in rows:
        users = out.setdefault(r.chain_id, [])
        if r.user not in users:
            users.append(r.user)
    return out


async def run(ctx: JobContext, indexer: IndexerClient | None = None) -> dict[int, int]:
    """Ask the indexer to re-read every bad debt position it currently reports."""
    own = indexer is None
    indexer = indexer or IndexerClient(
        ctx.settings.api_url, timeout=ctx.settings.http_timeout, log=ctx.log
    )
    refreshed: dict[int, int] = {}
    try:
        rows = await indexer.bad_debt()
        for chain_id, users in refresh_payloads(rows).items():
            try:
                await indexer.update_positions(chain_id, users)
            except Exception as e:
                ctx.log.error("[refresh] chain %s: %s", chain_id, e)
                continue
            refreshed[chain_id] = len(users)
            ctx.log.info("[refresh] chain %s: requested update of %d users", chain_id, len(users))
    finally:
        if own:
            await indexer.close()
    return refreshed
