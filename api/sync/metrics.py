"""
Recalculate `person_metrics` for every current official.

Usage (from `api/`):
    python -m sync.metrics
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from core import db, logs
from metrics import service as metrics_service

logger = logging.getLogger(__name__)


async def _main() -> dict[str, int]:
    await db.init_pool()
    try:
        return await metrics_service.calculate_all()
    finally:
        await db.close_pool()


def main(argv: list[str] | None = None) -> int:
    logs.configure_logging()
    argparse.ArgumentParser(description="Recalculate official metrics from stored votes and matters.").parse_args(argv)

    try:
        summary = asyncio.run(_main())
    except db.StoreError as exc:
        logger.error("metrics_failed error=%s", exc)
        return 1

    logger.info("metrics_complete %s", " ".join(f"{k}={v}" for k, v in summary.items()))
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
