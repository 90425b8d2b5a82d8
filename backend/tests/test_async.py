"""Tests for asynchronous validation and callback dispatch."""

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from formrules import (
    AsyncioDispatcher,
    ConfigurationError,
    InlineDispatcher,
    Mode,
    Validator,
    ValidatorSettings,
    create_default_registry,
)
from formrules.tasks import ValidationTask
from formrules.types import ValidationReport

from sample_forms import (
    BlockingRule,
    OrderedForm,
    RecordingAction,
    RecordingListener,
    UnorderedForm,
)


class QueueDispatcher:
    """Holds posted callbacks until the test runs them."""

    def __init__(self):
        self.pending = []

    def in_context(self):
        return False

    def post(self, callback):
        self.pending.append(callback)

    def run_pending(self):
        pending, self.pending = self.pending, []
        for callback in pending:
            callback()


@pytest.fixture
def registry():
    return create_default_registry()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def validator_factory(registry, listener):
    created = []

    def factory(form, **kwargs):
        validator = Validator(form, registry, **kwargs)
        validator.set_listener(listener)
        created.append(validator)
        return validator

    yield factory

    for validator in created:
        validator.shutdown()


# =============================================================================
# Asynchronous Validation
# =============================================================================


class TestAsyncValidation:
    def test_delivers_report(self, validator_factory, listener):
        form = OrderedForm(first="", second="b", third="c")
        validator = validator_factory(form)

        task = validator.validate(async_=True)
        report = task.result(timeout=5)

        assert isinstance(task, ValidationTask)
        assert [error.field for error in report.errors] == [form.first]
        assert listener.failures == [report.errors]

    def test_partial_variants_run_async(self, validator_factory, listener):
        form = OrderedForm(first="a", second="", third="")
        validator = validator_factory(form)

        report = validator.validate_before(form.third, async_=True).result(timeout=5)
        assert [error.field for error in report.errors] == [form.second]

        report = validator.validate_till(form.first, async_=True).result(timeout=5)
        assert report.errors == []
        assert report.has_more_errors is True
        assert listener.calls == 2

    def test_is_running_while_task_outstanding(self, validator_factory, listener):
        form = OrderedForm(first="a", second="b", third="c")
        validator = validator_factory(form)
        blocker = BlockingRule()
        validator.attach_rules(form.first, blocker)

        task = validator.validate(async_=True)
        assert blocker.started.wait(timeout=5)
        assert validator.is_running()

        blocker.gate.set()
        task.result(timeout=5)

        assert not validator.is_running()
        assert listener.succeeded == 1

    def test_cancel_without_task(self, validator_factory):
        validator = validator_factory(OrderedForm())

        assert validator.cancel() is False
        assert not validator.is_running()

    def test_cancel_after_completion(self, validator_factory):
        validator = validator_factory(OrderedForm(first="a", second="b", third="c"))
        validator.validate(async_=True).result(timeout=5)

        assert validator.cancel() is False

    def test_cancel_running_task_suppresses_delivery(self, validator_factory, listener):
        form = OrderedForm(first="a", second="b", third="c")
        validator = validator_factory(form)
        blocker = BlockingRule()
        validator.attach_rules(form.first, blocker)

        task = validator.validate(async_=True)
        assert blocker.started.wait(timeout=5)

        assert validator.cancel() is True
        assert not validator.is_running()

        blocker.gate.set()
        # The run completes, only the delivery is dropped
        report = task.result(timeout=5)
        assert report.succeeded
        assert task.cancelled()
        assert listener.calls == 0

    def test_new_run_cancels_previous(self, validator_factory, listener):
        form = OrderedForm(first="a", second="b", third="c")
        validator = validator_factory(form)
        blocker = BlockingRule()
        validator.attach_rules(form.first, blocker)

        first = validator.validate(async_=True)
        assert blocker.started.wait(timeout=5)
        second = validator.validate(async_=True)

        assert first.cancelled()
        blocker.gate.set()
        first.result(timeout=5)
        second.result(timeout=5)

        assert listener.succeeded == 1
        assert not validator.is_running()

    def test_configuration_errors_raised_synchronously(self, validator_factory, listener):
        form = UnorderedForm()
        validator = validator_factory(form)
        validator.mode = Mode.IMMEDIATE

        with pytest.raises(ConfigurationError, match="unordered"):
            validator.validate(async_=True)

        assert not validator.is_running()
        assert listener.calls == 0

    def test_runs_on_worker_thread(self, validator_factory, listener):
        validator = validator_factory(
            OrderedForm(first="a", second="b", third="c"),
            settings=ValidatorSettings(thread_name_prefix="form-worker"),
        )
        names = []
        validator.set_listener(listener)
        listener.on_succeeded = lambda: names.append(threading.current_thread().name)

        validator.validate(async_=True).result(timeout=5)

        assert names[0].startswith("form-worker")

    def test_mode_fixed_when_called(self, registry, listener):
        form = UnorderedForm(name="", email="")
        executor = ThreadPoolExecutor(max_workers=1)
        gate = threading.Event()
        executor.submit(gate.wait, 5)
        validator = Validator(form, registry, executor=executor)
        validator.set_listener(listener)

        task = validator.validate(async_=True)
        validator.mode = Mode.IMMEDIATE
        gate.set()
        report = task.result(timeout=5)
        executor.shutdown()

        assert [error.field for error in report.errors] == [form.name, form.email]

    def test_uses_injected_executor(self, registry, listener):
        executor = ThreadPoolExecutor(max_workers=1)
        validator = Validator(OrderedForm(first="a", second="b", third="c"), registry, executor=executor)
        validator.set_listener(listener)

        validator.validate(async_=True).result(timeout=5)
        validator.shutdown()

        # Injected executors belong to the caller
        assert executor.submit(lambda: 42).result(timeout=5) == 42
        executor.shutdown()

    def test_sync_call_waits_for_running_task(self, validator_factory, listener):
        form = OrderedForm(first="a", second="b", third="c")
        validator = validator_factory(form)
        blocker = BlockingRule()
        validator.attach_rules(form.first, blocker)

        task = validator.validate(async_=True)
        assert blocker.started.wait(timeout=5)
        threading.Timer(0.1, blocker.gate.set).start()

        assert validator.validate().succeeded
        task.result(timeout=5)
        assert listener.succeeded == 2


# =============================================================================
# ValidationTask
# =============================================================================


class TestValidationTask:
    def test_worker_failure_is_logged_and_kept(self, caplog):
        def work():
            raise RuntimeError("boom")

        delivered = []
        executor = ThreadPoolExecutor(max_workers=1)
        task = ValidationTask(work, delivered.append, InlineDispatcher())

        with caplog.at_level(logging.ERROR):
            task.start(executor)
            with pytest.raises(RuntimeError, match="boom"):
                task.result(timeout=5)
            executor.shutdown(wait=True)

        assert delivered == []
        assert "Asynchronous validation failed: boom" in caplog.text

    def test_finished_only_after_delivery(self):
        dispatcher = QueueDispatcher()
        delivered = []
        executor = ThreadPoolExecutor(max_workers=1)
        task = ValidationTask(ValidationReport, delivered.append, dispatcher).start(executor)

        task.result(timeout=5)
        executor.shutdown(wait=True)
        assert not task.done()

        dispatcher.run_pending()
        assert task.done()
        assert len(delivered) == 1
        assert task.cancel() is False

    def test_cancel_drops_posted_report(self):
        dispatcher = QueueDispatcher()
        delivered = []
        executor = ThreadPoolExecutor(max_workers=1)
        task = ValidationTask(ValidationReport, delivered.append, dispatcher).start(executor)
        task.result(timeout=5)
        executor.shutdown(wait=True)

        assert task.cancel() is True
        dispatcher.run_pending()

        assert delivered == []
        assert task.done()
        assert task.cancelled()

    def test_future_before_start_fails(self):
        task = ValidationTask(ValidationReport, lambda report: None, InlineDispatcher())

        assert task.done() is False
        assert task.cancel() is False
        with pytest.raises(RuntimeError, match="not been started"):
            task.future


# =============================================================================
# Dispatchers
# =============================================================================


class TestDispatchers:
    def test_inline_dispatcher_runs_immediately(self):
        calls = []
        dispatcher = InlineDispatcher()

        dispatcher.post(lambda: calls.append(1))

        assert dispatcher.in_context()
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_asyncio_dispatcher_context(self):
        dispatcher = AsyncioDispatcher(asyncio.get_running_loop())

        assert dispatcher.in_context()
        assert await asyncio.to_thread(dispatcher.in_context) is False

    @pytest.mark.asyncio
    async def test_report_delivered_on_event_loop(self, registry):
        loop_thread = threading.get_ident()
        listener = RecordingListener()
        action = RecordingAction()
        form = OrderedForm(first="a", second="", third="c")
        validator = Validator(form, registry, dispatcher=AsyncioDispatcher(asyncio.get_running_loop()))
        validator.set_listener(listener)
        validator.set_field_validated_action(action)

        task = validator.validate(async_=True)
        await asyncio.wrap_future(task.future)
        await asyncio.sleep(0)
        validator.shutdown()

        assert len(listener.failures) == 1
        assert listener.threads == [loop_thread]
        assert action.fields == [form.first, form.third]
        assert action.threads == [loop_thread, loop_thread]

    @pytest.mark.asyncio
    async def test_superseded_run_with_pending_delivery_stays_silent(self, registry):
        listener = RecordingListener()
        form = OrderedForm(first="", second="b", third="c")
        validator = Validator(form, registry, dispatcher=AsyncioDispatcher(asyncio.get_running_loop()))
        validator.set_listener(listener)

        # The worker finishes while the loop is busy, so delivery is still queued
        first = validator.validate(async_=True)
        first.result(timeout=5)
        assert validator.is_running()
        assert not first.done()

        form.first.text = "a"
        second = validator.validate(async_=True)
        await asyncio.wrap_future(second.future)
        await asyncio.sleep(0)
        validator.shutdown()

        assert first.cancelled()
        assert first.done()
        assert listener.failures == []
        assert listener.succeeded == 1
        assert not validator.is_running()

    @pytest.mark.asyncio
    async def test_cancel_with_pending_delivery(self, registry):
        listener = RecordingListener()
        validator = Validator(
            OrderedForm(first="a", second="b", third="c"),
            registry,
            dispatcher=AsyncioDispatcher(asyncio.get_running_loop()),
        )
        validator.set_listener(listener)

        validator.validate(async_=True).result(timeout=5)

        assert validator.cancel() is True
        await asyncio.sleep(0)
        validator.shutdown()
        assert listener.calls == 0

    @pytest.mark.asyncio
    async def test_sync_validation_on_loop_calls_action_directly(self, registry):
        listener = RecordingListener()
        action = RecordingAction()
        form = OrderedForm(first="a", second="b", third="c")
        validator = Validator(form, registry, dispatcher=AsyncioDispatcher(asyncio.get_running_loop()))
        validator.set_listener(listener)
        validator.set_field_validated_action(action)

        validator.validate()

        # Delivered inline, no loop iteration needed
        assert action.fields == [form.first, form.second, form.third]
        assert listener.succeeded == 1
