from __future__ import annotations

import asyncio

from clinic_bot.config import Settings
from clinic_bot.infra import get_logger
from clinic_bot.jobs import JOBS, make_context


class App:
    """Runs one clinic job end to end."""

    def __init__(self, settings: Settings, job: str, *, csv_path: str | None = None):
        if job not in JOBS:
            raise ValueError(f"unknown job {job!r}, expected one of: {', '.join(sorted(JOBS))}")
        self.settings = settings
        self.job = job
        self.csv_path = csv_path
        self.log = get_logger("clinic-bot", settings.log_level)

    async def run(self):
        self.log.info(
            "starting job=%s dry_run=%s chains=%s",
            self.job,
            self.settings.dry_run,
            ",".join(self.settings.chains) or "all",
        )
        ctx = make_context(self.settings, self.log)
        if self.job == "stale":
            out = await JOBS[self.job](ctx, self.csv_path)
        else:
            out = await JOBS[self.job](ctx)
        self.log.info("job=%s done", self.job)
        return out


def run_main(settings: Settings, job: str, *, csv_path: str | None = None):
    return asyncio.run(App(settings, job, csv_path=csv_path).run())
