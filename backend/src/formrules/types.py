"""Core types for the formrules validation engine.

This module defines the values exchanged between the engine and its host:
- Mode: BURST or IMMEDIATE validation
- ValidationError: the failed rules of a single field
- ValidationReport: the outcome of one validation run
- ValidationListener / FieldValidatedAction: host callbacks
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from formrules.fields import InputField
    from formrules.rules.base import Rule


class Mode(Enum):
    """Validation mode.

    BURST: Validate every rule of every field and report all failures
    IMMEDIATE: Stop after the first field that has a failing rule.
        Requires ordered fields.
    """

    BURST = "burst"
    IMMEDIATE = "immediate"


@dataclass
class ValidationError:
    """The rules that failed for one field, in evaluation order.

    Attributes:
        field: The field that failed validation
        rules: Failed rules, never empty
    """

    field: InputField
    rules: list[Rule] = field(default_factory=list)

    @property
    def collated_message(self) -> str:
        """Messages of all failed rules, one per line."""
        return "\n".join(rule.get_message() for rule in self.rules)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": getattr(self.field, "name", None),
            "messages": [rule.get_message() for rule in self.rules],
        }


@dataclass
class ValidationReport:
    """Result of a validation run.

    Attributes:
        errors: Per-field failures inside the reporting boundary, in field order
        has_more_errors: True if failures exist past the reporting boundary
    """

    errors: list[ValidationError] = field(default_factory=list)
    has_more_errors: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.errors and not self.has_more_errors


class ValidationListener(Protocol):
    """Receives the outcome of a validation run."""

    def on_succeeded(self) -> None:
        """Called when all rules pass."""
        ...

    def on_failed(self, errors: list[ValidationError]) -> None:
        """Called when one or several rules fail.

        In IMMEDIATE mode the list holds at most one error.
        """
        ...


class FieldValidatedAction(Protocol):
    """Callback invoked for every field whose rules all passed."""

    def on_all_rules_passed(self, field: InputField) -> None:
        ...
