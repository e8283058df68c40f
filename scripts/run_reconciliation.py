#!/usr/bin/env python3
"""
Run the problematic-contracts reconciliation.

With --once the job runs a single time and prints a per-pass summary.
Without it the script becomes the long-running worker: it waits the
configured start delay, then runs the job every interval until SIGINT or
SIGTERM, which cancels the current run between contracts.

Usage:
  python3 scripts/run_reconciliation.py --once [--config PATH]
  python3 scripts/run_reconciliation.py [--database-url URL] [--create-tables]

Settings come from the YAML file given by --config (packaged defaults
otherwise); INSURANCE_DATABASE_URL / INSURANCE_LOG_LEVEL and
--database-url override them.
"""

import argparse
import signal
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Problematic-contracts reconciliation worker")
    p.add_argument("--once", action="store_true", help="Run once and exit")
    p.add_argument("--config", type=Path, default=None, help="Settings YAML file")
    p.add_argument("--database-url", default=None, help="Overrides database.url")
    p.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before running (dev / SQLite)",
    )
    return p.parse_args(argv)


def _print_report(report) -> None:
    print()
    print(f"  Reconciliation run {report.run_id}")
    for result in report.passes:
        print(
            f"    {result.pass_name:<16} examined={result.examined:<5} "
            f"count={result.count:<5} failed={result.failed:<3} notified={result.notified}"
        )
    print(f"  Total problems: {report.total}" + ("  (cancelled)" if report.cancelled else ""))
    print()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    from insurance_batch import ProblematicContractsChecker, ReconciliationScheduler
    from insurance_config import get_active_config
    from insurance_config.bridges import reconciliation_policy
    from insurance_kernel.db import create_tables, get_session_factory, init_engine_from_url
    from insurance_kernel.logging_config import configure_logging, get_logger

    try:
        config = get_active_config(args.config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 2

    configure_logging(level=config.logging.level)
    logger = get_logger("scripts.run_reconciliation")

    database_url = args.database_url or config.database.url
    try:
        init_engine_from_url(database_url, echo=config.database.echo)
    except Exception as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    if args.create_tables:
        create_tables()

    policy = reconciliation_policy(config)

    def checker_factory(session):
        return ProblematicContractsChecker.for_session(session, policy=policy)

    scheduler = ReconciliationScheduler(
        get_session_factory(),
        checker_factory=checker_factory,
        interval_seconds=config.reconciliation.interval_seconds,
        start_delay_seconds=config.reconciliation.start_delay_seconds,
    )

    if args.once:
        report = scheduler.tick()
        if report is None:
            return 1
        _print_report(report)
        return 0

    def _shutdown(signum, _frame) -> None:
        logger.info("shutdown_requested", extra={"signal": signum})
        scheduler.stop()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    scheduler.start()
    while scheduler.is_running:
        scheduler.wait(timeout=1.0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
