"""
Re-evaluation Scheduler

Debounces validation while a consultation is being edited. Every update
restarts the timer; only the last record of a burst is evaluated and the
result is handed to the consumer callback.

State machine:
    IDLE --update--> PENDING --timer fires--> IDLE
    PENDING --update--> PENDING (timer restarted)
    PENDING --disable/close--> IDLE (timer cancelled, nothing delivered)
"""

import asyncio
import copy
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from ..config.constants import DEFAULT_DEBOUNCE_MS
from ..models.validation_result import ValidationResult
from ..utils.error_handler import (
    ConsultationSafetyError,
    EngineError,
    ErrorCode,
    EvaluationOutcome,
)
from ..utils.logger import get_logger
from .validation_engine import ValidationEngine, RecordInput

logger = get_logger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class ReEvaluationScheduler:
    """
    Debounced, cancellable re-evaluation of a changing consultation record.

    The timer is taken from an asyncio event loop (the running one unless a
    loop is passed). Anything with call_later(delay, callback) returning a
    handle with cancel() can stand in for the loop.

    Usage:
        with ReEvaluationScheduler(engine, on_validation_update=render) as scheduler:
            scheduler.update(record)
    """

    def __init__(
        self,
        engine: ValidationEngine,
        on_validation_update: Callable[[ValidationResult], Any],
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        real_time_validation: bool = True,
        on_validation_failure: Optional[Callable[[ConsultationSafetyError], Any]] = None,
        loop: Optional[Any] = None
    ):
        """
        Initialize the scheduler.

        Args:
            engine: Engine used for every evaluation
            on_validation_update: Receives each new ValidationResult
            debounce_ms: Quiet period before evaluating (milliseconds)
            real_time_validation: Start enabled; when False, update() is inert
            on_validation_failure: Receives the EngineError when the validator
                could not run; logged only when not given
            loop: Event loop (or compatible timer source) to schedule on
        """
        if debounce_ms < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {debounce_ms}")

        self.engine = engine
        self.on_validation_update = on_validation_update
        self.on_validation_failure = on_validation_failure
        self.debounce_ms = debounce_ms
        self._loop = loop
        self._enabled = real_time_validation
        self._closed = False
        self._handle = None
        self._pending_record: Optional[RecordInput] = None
        self._state = SchedulerState.IDLE

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state == SchedulerState.PENDING

    @property
    def is_enabled(self) -> bool:
        return self._enabled and not self._closed

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def update(self, record: RecordInput) -> None:
        """
        Feed the latest version of the record.

        Cancels any pending evaluation and restarts the debounce timer.
        Does nothing while real-time validation is disabled.
        """
        if not self.is_enabled:
            return

        loop = self._get_loop()
        self._cancel_pending()
        self._pending_record = self._snapshot(record)
        self._handle = loop.call_later(self.debounce_ms / 1000.0, self._fire)
        self._state = SchedulerState.PENDING

    def flush(self) -> Optional[EvaluationOutcome]:
        """
        Evaluate the pending record now instead of waiting for the timer.

        Returns:
            The outcome that was delivered, or None if nothing was pending
        """
        if not self.is_pending:
            return None

        record = self._pending_record
        self._cancel_pending()
        return self._evaluate_and_deliver(record)

    def enable(self) -> None:
        """Turn real-time validation on for future updates."""
        if self._closed:
            raise RuntimeError("Scheduler is closed")
        self._enabled = True

    def disable(self) -> None:
        """Turn real-time validation off, dropping any pending evaluation."""
        self._enabled = False
        self._cancel_pending()

    def close(self) -> None:
        """Release the timer for good. Safe to call more than once."""
        self._cancel_pending()
        self._closed = True

    def __enter__(self) -> 'ReEvaluationScheduler':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fire(self) -> None:
        record = self._pending_record
        self._handle = None
        self._pending_record = None
        self._state = SchedulerState.IDLE
        self._evaluate_and_deliver(record)

    def _evaluate_and_deliver(self, record: RecordInput) -> EvaluationOutcome:
        outcome = self.engine.evaluate(record)

        if outcome.success:
            self.on_validation_update(outcome.value)
        elif self.on_validation_failure is not None:
            self.on_validation_failure(outcome.error)
        else:
            logger.error(
                "Real-time validation failed; last result left in place",
                code=outcome.error.code.name
            )

        return outcome

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending_record = None
        self._state = SchedulerState.IDLE

    def _get_loop(self):
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise EngineError(
                "Real-time validation needs a running event loop",
                code=ErrorCode.NO_EVENT_LOOP,
                cause=e
            ) from e

    @staticmethod
    def _snapshot(record: RecordInput) -> RecordInput:
        # Records are frozen models; plain mappings may still be edited by the caller
        if isinstance(record, Mapping):
            return copy.deepcopy(dict(record))
        return record
