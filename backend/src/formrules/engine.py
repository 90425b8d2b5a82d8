"""Validation execution engine.

Runs a field rule map and produces a ValidationReport. Fields are
evaluated strictly in map order and rules strictly in rule-set order;
IMMEDIATE mode relies on that order to stop at the first failing field.
"""

import logging
from typing import Callable

from formrules.builder import FieldRuleMap
from formrules.errors import ConversionError
from formrules.fields import InputField
from formrules.rules.base import DeclaredBinding, QuickBinding, Rule, RuleBinding
from formrules.types import Mode, ValidationError, ValidationReport

logger = logging.getLogger(__name__)


def evaluate_binding(field: InputField, binding: RuleBinding) -> bool:
    """Evaluate one rule against a field.

    A ConversionError while adapting the field's value counts as a failure.
    """
    if isinstance(binding, DeclaredBinding):
        try:
            data = field if binding.adapter is None else binding.adapter(field)
            return bool(binding.rule.is_valid(data))
        except ConversionError as e:
            logger.debug("%r failed on %r: %s", binding.rule, field, e)
            return False
    if isinstance(binding, QuickBinding):
        return bool(binding.rule.is_valid(field))
    raise TypeError(f"Unknown rule binding: {binding!r}")


def run_validation(
    rule_map: FieldRuleMap,
    mode: Mode,
    boundary: InputField | None,
    on_field_passed: Callable[[InputField], None] | None = None,
) -> ValidationReport:
    """Validate every field in the map.

    Args:
        rule_map: Ordered field -> rule set map
        mode: BURST evaluates everything; IMMEDIATE stops after the first
            field with a failure
        boundary: Last field whose failures are reported, once it has been
            evaluated with at least one rule. Failures after it
            only set `has_more_errors`. None reports nothing.
        on_field_passed: Called for every evaluated field with no failures

    Returns:
        ValidationReport with per-field errors in field order
    """
    errors: list[ValidationError] = []
    has_more_errors = False
    reporting = boundary is not None

    for field, bindings in rule_map.items():
        if not (field.is_visible() and field.is_enabled()):
            logger.debug("Skipping hidden or disabled field %r", field)
            continue

        failed: list[Rule] = [
            binding.rule for binding in bindings if not evaluate_binding(field, binding)
        ]

        if failed:
            if reporting:
                errors.append(ValidationError(field=field, rules=failed))
            else:
                has_more_errors = True
        elif on_field_passed is not None:
            on_field_passed(field)

        # A skipped or rule-less boundary leaves the window open
        if field is boundary and bindings:
            reporting = False

        if failed and mode is Mode.IMMEDIATE:
            break

    return ValidationReport(errors=errors, has_more_errors=has_more_errors)
