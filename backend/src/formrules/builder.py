"""Rule-set construction.

Turns a controller's field specs into the field rule map the engine runs:
1. plan_rules: resolve the adapter for every declaration (type level)
2. build_field_rule_map: instantiate rules for the controller's fields
3. attach_quick_rules: add ad hoc rules to an existing map
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from formrules.adapters import Adapter
from formrules.declarations import RuleDeclaration
from formrules.errors import ConfigurationError
from formrules.fields import InputField
from formrules.introspection import FieldSpec, resolve_field
from formrules.registry import RuleRegistry
from formrules.rules.base import (
    DeclaredBinding,
    QuickBinding,
    QuickRule,
    RuleBinding,
    ValidationContext,
    sequence_of,
)

FieldRuleMap = dict[InputField, list[RuleBinding]]


@dataclass(frozen=True)
class RulePlan:
    """A declaration with the adapter resolved for its field type."""

    declaration: RuleDeclaration
    data_type: type | None
    adapter: Adapter | None


def plan_field(spec: FieldSpec, registry: RuleRegistry) -> list[RulePlan]:
    """Resolve adapters for every declaration on one field.

    Raises:
        ConfigurationError: If a declaration needs an adapter and none is registered
    """
    plans = []
    for declaration in spec.declarations:
        kind = type(declaration)
        data_type = declaration.data_type
        adapter = None
        if data_type is not None:
            adapter = registry.resolve_adapter(kind, spec.field_type, data_type)
            if adapter is None:
                field_type = spec.field_type.__name__
                raise ConfigurationError(
                    f"To use '{kind.__name__}' on '{field_type}', register an adapter "
                    f"that returns a '{data_type.__name__}' from the '{field_type}'."
                )
        plans.append(RulePlan(declaration=declaration, data_type=data_type, adapter=adapter))
    return plans


def plan_rules(specs: Sequence[FieldSpec], registry: RuleRegistry) -> list[list[RulePlan]]:
    """Resolve adapters for every field spec, in field order."""
    return [plan_field(spec, registry) for spec in specs]


def build_field_rule_map(
    controller: Any,
    specs: Sequence[FieldSpec],
    registry: RuleRegistry,
    context: ValidationContext,
) -> FieldRuleMap:
    """Create the ordered field -> rule set map for a controller instance.

    Rule sets are sorted by rule sequence; equal sequences keep declaration
    order. The map is stored on the context before rules are verified, so
    rules that look up other fields can check their counterparts.
    """
    plans = plan_rules(specs, registry)

    rule_map: FieldRuleMap = {}
    for spec, field_plans in zip(specs, plans):
        bindings: list[RuleBinding] = []
        for plan in field_plans:
            rule = plan.declaration.rule_class(plan.declaration, context)
            bindings.append(DeclaredBinding(rule=rule, adapter=plan.adapter))
        bindings.sort(key=sequence_of)
        rule_map[resolve_field(controller, spec)] = bindings

    context.field_rule_map = rule_map
    verify_rules(rule_map, context)

    return rule_map


def verify_rules(rule_map: FieldRuleMap, context: ValidationContext) -> None:
    """Run the verify hook of every declarative rule in the map.

    Raises:
        ConfigurationError: If a rule cannot run against this map
    """
    for bindings in rule_map.values():
        for binding in bindings:
            if isinstance(binding, DeclaredBinding):
                binding.rule.verify(context)


def attach_quick_rules(
    rule_map: FieldRuleMap,
    field: InputField,
    rules: Sequence[QuickRule],
    ordered: bool,
) -> None:
    """Append quick rules to a field's rule set and re-sort it.

    Raises:
        ConfigurationError: If the map is ordered and the field is not in it
    """
    if ordered and field not in rule_map:
        raise ConfigurationError(
            f"All fields are ordered, so this '{type(field).__name__}' should be ordered "
            "too. Declare it on the controller and add an 'Order' marker."
        )

    bindings = rule_map.get(field, [])
    bindings.extend(QuickBinding(rule=rule) for rule in rules)
    bindings.sort(key=sequence_of)
    rule_map[field] = bindings
