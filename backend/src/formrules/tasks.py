"""Asynchronous validation runs.

A ValidationTask runs one engine pass on an executor thread and posts the
report to the callback context. Cancellation is best-effort: a run that
has already started is not interrupted, it finishes and its report is
dropped. A task counts as finished once its report has been delivered or
dropped, not when the worker returns.
"""

import logging
import threading
from concurrent.futures import Executor, Future
from typing import Callable

from formrules.dispatch import CallbackDispatcher
from formrules.types import ValidationReport

logger = logging.getLogger(__name__)


class ValidationTask:
    """A single asynchronous validation run.

    Args:
        work: Produces the report; runs on the executor
        deliver: Receives the report on the callback context
        dispatcher: Callback context used for delivery
    """

    def __init__(
        self,
        work: Callable[[], ValidationReport],
        deliver: Callable[[ValidationReport], None],
        dispatcher: CallbackDispatcher,
    ):
        self._work = work
        self._deliver = deliver
        self._dispatcher = dispatcher
        self._cancelled = threading.Event()
        # Set once the report was delivered, dropped or never produced
        self._finished = threading.Event()
        self._future: Future | None = None

    def start(self, executor: Executor) -> "ValidationTask":
        self._future = executor.submit(self._run)
        self._future.add_done_callback(self._log_failure)
        return self

    @property
    def future(self) -> Future:
        if self._future is None:
            raise RuntimeError("Validation task has not been started")
        return self._future

    def done(self) -> bool:
        """True once the report has been delivered or dropped."""
        return self._finished.is_set()

    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> bool:
        """Request cancellation.

        A report already posted to the callback context but not yet
        delivered is dropped.

        Returns:
            True if the task had not finished yet, False otherwise
        """
        if self._future is None or self._finished.is_set():
            return False
        self._cancelled.set()
        if self._future.cancel():
            self._finished.set()
        return True

    def result(self, timeout: float | None = None) -> ValidationReport:
        """Wait for the run and return its report (even if cancelled mid-run)."""
        return self.future.result(timeout)

    def _run(self) -> ValidationReport:
        try:
            report = self._work()
        except Exception:
            self._finished.set()
            raise

        if self._cancelled.is_set():
            logger.debug("Validation task cancelled, dropping report")
            self._finished.set()
        else:
            self._dispatcher.post(lambda: self._deliver_unless_cancelled(report))
        return report

    def _deliver_unless_cancelled(self, report: ValidationReport) -> None:
        try:
            if self._cancelled.is_set():
                logger.debug("Validation task cancelled before delivery, dropping report")
                return
            self._deliver(report)
        finally:
            self._finished.set()

    def _log_failure(self, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Asynchronous validation failed: %s", error, exc_info=error)
