from __future__ import annotations

import csv
from collections import defaultdict
from pathlib import Path

from clinic_bot.domain import StalePosition

REQUIRED_COLUMNS = ("user", "chain_id", "pool", "reserve")


def read_stale_positions(path: str) -> list[StalePosition]:
    """Rows exported from the indexer's user-positions table."""
    rows = []
    with Path(path).open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"{path}: missing column(s) {', '.join(missing)}")
        for row in reader:
            user = (row.get("user") or "").strip()
            if not user:
                continue
            rows.append(
                StalePosition(
                    user=user,
                    chain_id=int(row["chain_id"]),
                    pool=row["pool"].strip(),
                    reserve=row["reserve"].strip(),
                )
            )
    return rows


def group_stale_positions(rows: list[StalePosition]) -> dict[int, dict[str, dict[str, list[str]]]]:
    """chain id -> pool -> reserve -> users, keys lowercased."""
    out: dict[int, dict[str, dict[str, list[str]]]] = defaultdict(lambda: defaultdict(dict))
    for r in rows:
        users = out[r.chain_id][r.pool.lower()].setdefault(r.reserve.lower(), [])
        if r.user not in users:
            users.append(r.user)
    return {cid: {pool: dict(res) for pool, res in pools.items()} for cid, pools in out.items()}
