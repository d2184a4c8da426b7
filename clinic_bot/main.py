from __future__ import annotations

import argparse
import dataclasses

from clinic_bot.config import load_settings
from clinic_bot.jobs import JOBS
from clinic_bot.runtime.app import run_main


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="clinic-bot", description="Aave clinic liquidation and bad debt bots")
    ap.add_argument("job", choices=sorted(JOBS))
    ap.add_argument("--env-file", default=None, help="dotenv file to load (default: $CLINIC_ENV_FILE or .env)")
    ap.add_argument("--chains", default=None, help="comma separated pool keys, e.g. arbitrum,base")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", dest="dry_run", action="store_true", default=None,
                      help="simulate only, never sign")
    mode.add_argument("--live", dest="dry_run", action="store_false", help="submit transactions")
    ap.add_argument("--csv", default=None, help="stale positions CSV (stale job)")
    ap.add_argument("--log-level", default=None)
    return ap


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.env_file)
    overrides = {}
    if args.chains is not None:
        overrides["chains"] = tuple(c.strip().lower() for c in args.chains.split(",") if c.strip())
    if args.dry_run is not None:
        overrides["dry_run"] = args.dry_run
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
    run_main(settings, args.job, csv_path=args.csv)


if __name__ == "__main__":
    main()
