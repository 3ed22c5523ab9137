"""Tests for the debounced re-evaluation scheduler."""

import asyncio

import pytest

from consultation_safety.utils.error_handler import EngineError, ErrorCode
from consultation_safety.validation import ReEvaluationScheduler, SchedulerState


class FakeHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Virtual clock exposing the slice of the event loop the scheduler uses."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay, callback):
        handle = FakeHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [h for h in self.handles if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.handles.remove(handle)
            self.now = handle.when
            handle.callback()
        self.now = target

    @property
    def active(self):
        return [h for h in self.handles if not h.cancelled]


@pytest.fixture
def loop():
    return FakeLoop()


@pytest.fixture
def delivered():
    return []


@pytest.fixture
def scheduler(engine, loop, delivered):
    return ReEvaluationScheduler(engine, delivered.append, loop=loop)


# =============================================================================
# DEBOUNCE
# =============================================================================

def test_burst_of_updates_evaluates_last_record_once(scheduler, loop, delivered, complete_data):
    first = dict(complete_data, diagnosis="")
    second = dict(complete_data, treatment="")

    scheduler.update(first)
    loop.advance(0.2)
    scheduler.update(second)
    loop.advance(0.2)
    scheduler.update(complete_data)

    loop.advance(0.99)
    assert delivered == []
    assert scheduler.state == SchedulerState.PENDING

    loop.advance(0.02)
    assert len(delivered) == 1
    assert delivered[0].is_valid is True
    assert delivered[0].score == 100
    assert loop.now == pytest.approx(1.41)
    assert scheduler.state == SchedulerState.IDLE


def test_update_restarts_timer(scheduler, loop):
    scheduler.update({})
    first_handle = loop.handles[0]

    scheduler.update({"diagnosis": "Asma"})

    assert first_handle.cancelled
    assert len(loop.active) == 1


def test_custom_debounce(engine, loop, delivered):
    scheduler = ReEvaluationScheduler(engine, delivered.append, debounce_ms=250, loop=loop)

    scheduler.update({})
    loop.advance(0.25)

    assert len(delivered) == 1


def test_zero_debounce_still_defers(engine, loop, delivered):
    scheduler = ReEvaluationScheduler(engine, delivered.append, debounce_ms=0, loop=loop)

    scheduler.update({})
    assert delivered == []

    loop.advance(0)
    assert len(delivered) == 1


def test_separate_bursts_each_deliver(scheduler, loop, delivered):
    scheduler.update({"diagnosis": ""})
    loop.advance(1.0)
    scheduler.update({"diagnosis": "Asma"})
    loop.advance(1.0)

    assert len(delivered) == 2


def test_negative_debounce_rejected(engine, loop):
    with pytest.raises(ValueError):
        ReEvaluationScheduler(engine, lambda result: None, debounce_ms=-1, loop=loop)


def test_mapping_is_snapshotted_at_update(scheduler, loop, delivered, complete_data):
    scheduler.update(complete_data)
    complete_data["diagnosis"] = ""

    loop.advance(1.0)

    assert delivered[0].is_valid is True


# =============================================================================
# ENABLE / DISABLE / CLOSE
# =============================================================================

def test_disabled_scheduler_is_inert(engine, loop, delivered):
    scheduler = ReEvaluationScheduler(engine, delivered.append, real_time_validation=False, loop=loop)

    scheduler.update({})
    loop.advance(5.0)

    assert loop.handles == []
    assert delivered == []
    assert scheduler.is_enabled is False


def test_disable_cancels_pending(scheduler, loop, delivered):
    scheduler.update({})
    scheduler.disable()
    loop.advance(5.0)

    assert delivered == []
    assert scheduler.state == SchedulerState.IDLE


def test_enable_after_disable(scheduler, loop, delivered):
    scheduler.disable()
    scheduler.enable()
    scheduler.update({})
    loop.advance(1.0)

    assert len(delivered) == 1


def test_close_cancels_and_stays_closed(scheduler, loop, delivered):
    scheduler.update({})
    scheduler.close()
    scheduler.close()
    scheduler.update({})
    loop.advance(5.0)

    assert delivered == []
    assert scheduler.is_enabled is False
    with pytest.raises(RuntimeError):
        scheduler.enable()


def test_context_manager_closes(engine, loop, delivered):
    with ReEvaluationScheduler(engine, delivered.append, loop=loop) as scheduler:
        scheduler.update({})

    loop.advance(5.0)
    assert delivered == []


# =============================================================================
# FLUSH
# =============================================================================

def test_flush_evaluates_immediately(scheduler, loop, delivered, complete_data):
    scheduler.update(complete_data)

    outcome = scheduler.flush()

    assert outcome.success
    assert delivered == [outcome.value]
    assert scheduler.state == SchedulerState.IDLE
    loop.advance(5.0)
    assert len(delivered) == 1


def test_flush_with_nothing_pending(scheduler, delivered):
    assert scheduler.flush() is None
    assert delivered == []


# =============================================================================
# FAILURES
# =============================================================================

def test_failure_goes_to_failure_callback(engine, loop, delivered):
    failures = []
    scheduler = ReEvaluationScheduler(
        engine, delivered.append, on_validation_failure=failures.append, loop=loop
    )

    scheduler.update({"medications": "salbutamol"})
    loop.advance(1.0)

    assert delivered == []
    assert len(failures) == 1
    assert failures[0].code == ErrorCode.INVALID_RECORD


def test_failure_without_callback_is_logged(scheduler, loop, delivered, caplog):
    scheduler.update({"patient_age": -3})
    loop.advance(1.0)

    assert delivered == []
    assert "Real-time validation failed" in caplog.text
    assert "INVALID_RECORD" in caplog.text


def test_failure_keeps_scheduler_usable(scheduler, loop, delivered):
    scheduler.update({"medications": "salbutamol"})
    loop.advance(1.0)
    scheduler.update({})
    loop.advance(1.0)

    assert len(delivered) == 1


def test_update_outside_event_loop(engine, delivered):
    scheduler = ReEvaluationScheduler(engine, delivered.append)

    with pytest.raises(EngineError) as exc_info:
        scheduler.update({})

    assert exc_info.value.code == ErrorCode.NO_EVENT_LOOP
    assert scheduler.state == SchedulerState.IDLE


# =============================================================================
# REAL EVENT LOOP
# =============================================================================

def test_running_event_loop(engine, complete_data):
    delivered = []

    async def edit_consultation():
        scheduler = ReEvaluationScheduler(engine, delivered.append, debounce_ms=20)
        scheduler.update(dict(complete_data, diagnosis=""))
        await asyncio.sleep(0.005)
        scheduler.update(complete_data)
        await asyncio.sleep(0.1)
        scheduler.close()

    asyncio.run(edit_consultation())

    assert len(delivered) == 1
    assert delivered[0].is_valid is True
