from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_BOT_ADDRESS = "0x3Cbded22F878aFC8d39dCD744d3Fe62086B76193"
DEFAULT_API_URL = "https://api.onaave.com"
DEFAULT_RELAY_URL = "https://relay.flashbots.net"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        value = default
    else:
        value = int(raw)
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_float(name: str, default: float, min_value: float | None = None) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        value = default
    else:
        value = float(raw)
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_list(name: str) -> tuple[str, ...]:
    raw = os.environ.get(name, "")
    return tuple(p.strip().lower() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    private_key: str
    bot_address: str
    api_url: str
    relay_url: str
    dry_run: bool
    log_level: str
    data_dir: str
    chains: tuple[str, ...]
    gas_budget_pct: int
    confirmations: int
    private_tx_blocks: int
    read_concurrency: int
    http_timeout: float
    receipt_timeout: float
    hf_page_size: int
    alchemy_key: str
    quicknode_token: str
    quicknode_endpoint: str
    stale_positions_csv: str
    stale_dust_numerator: int


def load_settings(env_file: str | None = None) -> Settings:
    path = env_file or os.environ.get("CLINIC_ENV_FILE", ".env")
    load_dotenv(os.path.expanduser(path))
    return Settings(
        private_key=os.environ.get("PRIVATE_KEY", "").strip(),
        bot_address=os.environ.get("CLINIC_BOT_ADDRESS", DEFAULT_BOT_ADDRESS).strip(),
        api_url=os.environ.get("CLINIC_API_URL", DEFAULT_API_URL).strip().rstrip("/"),
        relay_url=os.environ.get("FLASHBOTS_RELAY_URL", DEFAULT_RELAY_URL).strip(),
        dry_run=_env_bool("DRY_RUN", True),
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper(),
        data_dir=os.environ.get("DATA_DIR", "").strip(),
        chains=_env_list("CLINIC_CHAINS"),
        gas_budget_pct=min(100, _env_int("GAS_BUDGET_PCT", 40, min_value=1)),
        confirmations=_env_int("CONFIRMATIONS", 5, min_value=1),
        private_tx_blocks=_env_int("PRIVATE_TX_BLOCKS", 100, min_value=1),
        read_concurrency=_env_int("READ_CONCURRENCY", 16, min_value=1),
        http_timeout=_env_float("HTTP_TIMEOUT", 30.0, min_value=1.0),
        receipt_timeout=_env_float("RECEIPT_TIMEOUT", 300.0, min_value=10.0),
        hf_page_size=_env_int("HF_PAGE_SIZE", 10_000, min_value=1),
        alchemy_key=os.environ.get("ALCHEMY_API_KEY", "").strip(),
        quicknode_token=os.environ.get("QUICKNODE_TOKEN", "").strip(),
        quicknode_endpoint=os.environ.get("QUICKNODE_ENDPOINT_NAME", "").strip(),
        stale_positions_csv=os.environ.get(
            "STALE_POSITIONS_CSV", "indexer_aave_user_positions_rows.csv"
        ).strip(),
        stale_dust_numerator=_env_int("STALE_DUST_NUMERATOR", 2, min_value=1),
    )
