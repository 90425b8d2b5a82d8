"""The Validator: validates the fields of a controller object.

A Validator validates in one of two modes:
- BURST: every field is validated and all failures are reported at once.
  Fields need not be ordered.
- IMMEDIATE: validation stops after the first field with a failing rule.
  Fields must be ordered.

There are three flavors of validation:
- validate(): validates every field
- validate_till(field): reports failures up to and including `field`
- validate_before(field): reports failures of the fields before `field`

The partial flavors require ordered fields. Failures past the boundary
are not reported individually, they only make the run fail.

Usage:
    registry = create_default_registry()

    validator = Validator(form, registry)
    validator.set_listener(listener)
    validator.validate()
"""

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any

from formrules.builder import (
    FieldRuleMap,
    attach_quick_rules,
    build_field_rule_map,
    verify_rules,
)
from formrules.config import ValidatorSettings
from formrules.dispatch import CallbackDispatcher, InlineDispatcher
from formrules.engine import run_validation
from formrules.errors import ConfigurationError, require
from formrules.fields import InputField
from formrules.introspection import collect_field_specs
from formrules.registry import RuleRegistry
from formrules.rules.base import QuickRule, ValidationContext
from formrules.tasks import ValidationTask
from formrules.types import (
    FieldValidatedAction,
    Mode,
    ValidationListener,
    ValidationReport,
)

logger = logging.getLogger(__name__)


class Validator:
    """Validates the fields declared on a controller.

    The field rule map is built on the first validation (or the first
    attach_rules/detach_rules call) and reused for the lifetime of the
    validator.

    Args:
        controller: Object whose class declares the validated fields
        registry: Registry resolving declarations and adapters
        settings: Initial mode and executor sizing
        dispatcher: Callback context for asynchronous results; defaults to
            running callbacks inline
        executor: Executor for asynchronous runs; defaults to a thread pool
            owned by the validator
    """

    def __init__(
        self,
        controller: Any,
        registry: RuleRegistry,
        *,
        settings: ValidatorSettings | None = None,
        dispatcher: CallbackDispatcher | None = None,
        executor: Executor | None = None,
    ):
        require(controller, "controller")
        require(registry, "registry")
        self.controller = controller
        self.registry = registry
        self.settings = settings or ValidatorSettings()

        self._mode = self.settings.mode
        self._listener: ValidationListener | None = None
        self._field_validated_action: FieldValidatedAction | None = None
        self._dispatcher = dispatcher
        self._executor = executor
        self._owns_executor = False

        self._context = ValidationContext()
        self._rule_map: FieldRuleMap | None = None
        self._ordered = False
        self._task: ValidationTask | None = None
        self._run_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_listener(self, listener: ValidationListener) -> None:
        """Set the listener receiving validation outcomes. Required."""
        require(listener, "listener")
        self._listener = listener

    def set_field_validated_action(self, action: FieldValidatedAction | None) -> None:
        """Set the action invoked for every field whose rules all pass."""
        self._field_validated_action = action

    @property
    def mode(self) -> Mode:
        return self._mode

    @mode.setter
    def mode(self, mode: Mode) -> None:
        require(mode, "mode")
        self._mode = mode

    def get_mode(self) -> Mode:
        return self._mode

    def set_mode(self, mode: Mode) -> None:
        self.mode = mode

    @property
    def ordered(self) -> bool:
        """True if every validated field has an explicit position."""
        self._ensure_rule_map(allow_empty=True)
        return self._ordered

    @property
    def fields(self) -> list[InputField]:
        """Validated fields in validation order."""
        return list(self._ensure_rule_map(allow_empty=True))

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self, async_: bool = False) -> ValidationReport | ValidationTask:
        """Validate all fields.

        IMMEDIATE mode requires ordered fields. An asynchronous call cancels
        any pending asynchronous validation and starts a new one.

        Returns:
            The report when synchronous, the running task when asynchronous
        """
        rule_map = self._ensure_rule_map()
        last_field = next(reversed(rule_map))
        if self._mode is Mode.IMMEDIATE:
            return self._validate(last_field, f"in {self._mode.name} mode.", async_)
        return self._validate(last_field, None, async_)

    def validate_till(
        self, field: InputField, async_: bool = False
    ) -> ValidationReport | ValidationTask:
        """Validate fields, reporting failures up to and including `field`."""
        require(field, "field")
        self._ensure_rule_map()
        return self._validate(field, "when using 'validate_till()'.", async_)

    def validate_before(
        self, field: InputField, async_: bool = False
    ) -> ValidationReport | ValidationTask:
        """Validate fields, reporting failures of the fields before `field`."""
        require(field, "field")
        rule_map = self._ensure_rule_map()
        previous = self._field_before(rule_map, field)
        return self._validate(previous, "when using 'validate_before()'.", async_)

    def is_running(self) -> bool:
        """True while an asynchronous validation has not delivered its report."""
        return self._task is not None and not self._task.done()

    def cancel(self) -> bool:
        """Cancel the running asynchronous validation.

        Returns:
            True if a running task was cancelled, False otherwise
        """
        cancelled = False
        if self._task is not None:
            cancelled = self._task.cancel()
            self._task = None
        return cancelled

    def shutdown(self, wait: bool = True) -> None:
        """Release the executor this validator created, if any."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
            self._owns_executor = False

    # -------------------------------------------------------------------------
    # Ad hoc rules
    # -------------------------------------------------------------------------

    def attach_rules(self, field: InputField, *rules: QuickRule) -> None:
        """Add one or more quick rules to a field.

        If all fields are ordered the field must already be declared on
        the controller.
        """
        require(field, "field")
        if not rules:
            raise ConfigurationError("'rules' cannot be empty.")
        for rule in rules:
            require(rule, "rule")

        rule_map = self._ensure_rule_map(allow_empty=True)
        attach_quick_rules(rule_map, field, rules, self._ordered)

    def detach_rules(self, field: InputField) -> None:
        """Remove every rule of a field.

        Raises:
            ConfigurationError: If a remaining rule depends on the field,
                e.g. a ConfirmPassword rule on another field when `field`
                carries the Password declaration. The rules are kept.
        """
        require(field, "field")
        rule_map = self._ensure_rule_map(allow_empty=True)

        remaining = ValidationContext()
        remaining.field_rule_map = {
            current: bindings for current, bindings in rule_map.items() if current is not field
        }
        verify_rules(remaining.field_rule_map, remaining)
        rule_map.pop(field, None)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _ensure_rule_map(self, allow_empty: bool = False) -> FieldRuleMap:
        # Built lazily so the validator can be created before the controller's fields
        if self._rule_map is None:
            specs = collect_field_specs(type(self.controller), self.registry)
            self._rule_map = build_field_rule_map(
                self.controller, specs.specs, self.registry, self._context
            )
            self._ordered = specs.ordered
            logger.debug(
                "Built rules for %d field(s) of %s (ordered: %s)",
                len(self._rule_map),
                type(self.controller).__name__,
                self._ordered,
            )

        if not allow_empty and not self._rule_map:
            raise ConfigurationError(
                "No rules found. You must have at least one rule to validate. "
                "If you are using custom declarations, make sure that you have "
                "registered them with the registry."
            )
        return self._rule_map

    def _field_before(self, rule_map: FieldRuleMap, field: InputField) -> InputField | None:
        previous = None
        for current in rule_map:
            if current is field:
                return previous
            previous = current
        return None

    def _validate(
        self,
        boundary: InputField | None,
        ordering_reason: str | None,
        async_: bool,
    ) -> ValidationReport | ValidationTask:
        if ordering_reason is not None and not self._ordered:
            raise ConfigurationError(
                "Rules are unordered, all fields should be ordered using the "
                f"'Order' marker {ordering_reason}"
            )
        if self._listener is None:
            raise ConfigurationError("'listener' cannot be None.")

        # The run uses the mode the preconditions were checked against
        mode = self._mode
        if async_:
            return self._validate_async(boundary, mode)

        report = self._run(boundary, mode)
        self._notify(report)
        return report

    def _validate_async(self, boundary: InputField | None, mode: Mode) -> ValidationTask:
        if self._task is not None:
            self._task.cancel()

        self._task = ValidationTask(
            work=lambda: self._run(boundary, mode),
            deliver=self._notify,
            dispatcher=self._get_dispatcher(),
        ).start(self._get_executor())
        return self._task

    def _run(self, boundary: InputField | None, mode: Mode) -> ValidationReport:
        with self._run_lock:
            return run_validation(
                self._rule_map,
                mode,
                boundary,
                self._on_field_passed if self._field_validated_action else None,
            )

    def _notify(self, report: ValidationReport) -> None:
        if report.succeeded:
            self._listener.on_succeeded()
        else:
            self._listener.on_failed(report.errors)

    def _on_field_passed(self, field: InputField) -> None:
        action = self._field_validated_action
        if action is None:
            return
        dispatcher = self._get_dispatcher()
        if dispatcher.in_context():
            action.on_all_rules_passed(field)
        else:
            dispatcher.post(lambda: action.on_all_rules_passed(field))

    def _get_dispatcher(self) -> CallbackDispatcher:
        if self._dispatcher is None:
            self._dispatcher = InlineDispatcher()
        return self._dispatcher

    def _get_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.settings.max_workers,
                thread_name_prefix=self.settings.thread_name_prefix,
            )
            self._owns_executor = True
        return self._executor
