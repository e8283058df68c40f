"""
ReconciliationScheduler -- In-process periodic runner for the reconciliation.

Contract:
    Waits ``start_delay_seconds``, then runs the reconciliation engine every
    ``interval_seconds`` in a background thread until stopped.  Each run
    gets a fresh session from ``session_factory``.

Architecture: insurance_batch/services.  Wraps
    ``ProblematicContractsChecker``; the engine itself knows nothing about
    threads or intervals.

Invariants enforced:
    - One run at a time: runs happen sequentially on the scheduler thread.
    - Graceful shutdown: ``stop()`` sets the event the running engine
      checks between contracts and between passes, so the contract being
      handled is finished and the rest of the run is abandoned.
    - A failed run is logged and does not stop the loop.
"""

from __future__ import annotations

import threading
from typing import Callable

from sqlalchemy.orm import Session

from insurance_kernel.logging_config import get_logger

from insurance_batch.domain.types import ReconciliationReport
from insurance_batch.services.reconciliation import ProblematicContractsChecker

logger = get_logger("batch.scheduler")


class ReconciliationScheduler:
    """Background scheduler for the reconciliation engine.

    Contract:
        - ``tick()`` performs one run synchronously (public for testing and
          on-demand triggers).
        - ``start()`` / ``stop()`` for background thread operation.

    Non-goals:
        - NOT a distributed scheduler (no leader election).
        - Does NOT catch up on missed intervals.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        checker_factory: Callable[[Session], ProblematicContractsChecker] | None = None,
        interval_seconds: float = 3600,
        start_delay_seconds: float = 30,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if start_delay_seconds < 0:
            raise ValueError("start_delay_seconds must be >= 0")
        self._session_factory = session_factory
        self._checker_factory = checker_factory or ProblematicContractsChecker.for_session
        self._interval = interval_seconds
        self._start_delay = start_delay_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._runs = 0
        self._last_report: ReconciliationReport | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def tick(self) -> ReconciliationReport | None:
        """Run the reconciliation once.  Returns None if the run failed."""
        session = self._session_factory()
        try:
            checker = self._checker_factory(session)
            report = checker.run(stop_event=self._stop_event)
            self._runs += 1
            self._last_report = report
            return report
        except Exception:
            session.rollback()
            logger.exception("scheduler_tick_failed")
            return None
        finally:
            session.close()

    def start(self) -> None:
        """Start the scheduler in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="reconciliation-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "scheduler_started",
            extra={
                "interval_seconds": self._interval,
                "start_delay_seconds": self._start_delay,
            },
        )

    def stop(self, timeout: float = 30.0) -> None:
        """Signal stop and wait for the scheduler thread to finish.

        Args:
            timeout: Max seconds to wait for the thread to finish.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("scheduler_stopped", extra={"runs": self._runs})

    def wait(self, timeout: float | None = None) -> None:
        """Block until the scheduler thread exits (e.g. after ``stop()``)."""
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def runs(self) -> int:
        return self._runs

    @property
    def last_report(self) -> ReconciliationReport | None:
        return self._last_report

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_loop(self) -> None:
        """Background loop.  Exits when stop_event is set."""
        if self._stop_event.wait(timeout=self._start_delay):
            return
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(timeout=self._interval)
