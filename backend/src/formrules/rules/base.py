"""Rule abstractions for formrules.

Two kinds of rules exist:
- DeclarativeRule: created from a RuleDeclaration on a controller field and
  evaluated against the value an adapter extracts from the field
- QuickRule: attached ad hoc to a field and evaluated against the field itself

A rule set stores each rule together with how it is evaluated, as one of
the two RuleBinding variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Union

from formrules.errors import ConfigurationError

if TYPE_CHECKING:
    from formrules.adapters import Adapter
    from formrules.declarations import RuleDeclaration
    from formrules.fields import InputField

# Rules without an explicit sequence
UNSEQUENCED = -1


class Rule:
    """A predicate evaluated during validation.

    Subclasses override `is_valid` and usually `get_message`.
    """

    def __init__(self, sequence: int = UNSEQUENCED):
        self.sequence = sequence

    def is_valid(self, data: Any) -> bool:
        raise NotImplementedError("Subclasses must implement is_valid()")

    def get_message(self) -> str:
        return f"{type(self).__name__} failed"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sequence={self.sequence})"


class DeclarativeRule(Rule):
    """A rule backed by a RuleDeclaration.

    `data_type` is the type of value the rule understands. The rule
    builder resolves an adapter producing that type from the field. Rules
    with `data_type = None` receive the field itself.
    """

    data_type: ClassVar[type | None] = str
    default_message: ClassVar[str] = "Invalid value"

    def __init__(self, declaration: RuleDeclaration, context: ValidationContext):
        super().__init__(declaration.sequence)
        self.declaration = declaration
        self.context = context

    def get_message(self) -> str:
        if self.declaration.message:
            return self.declaration.message
        return self.default_message

    def verify(self, context: ValidationContext) -> None:
        """Check the rule can run once all rules exist. No-op by default."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.declaration!r})"


class QuickRule(Rule):
    """A rule attached programmatically with `Validator.attach_rules`.

    Quick rules inspect the field directly, no adapter is involved.
    """

    def is_valid(self, field: InputField) -> bool:
        raise NotImplementedError("Subclasses must implement is_valid()")


@dataclass(frozen=True)
class DeclaredBinding:
    """A declarative rule with the adapter feeding it (None when it takes the field)."""

    rule: DeclarativeRule
    adapter: Adapter | None = None


@dataclass(frozen=True)
class QuickBinding:
    """A quick rule, evaluated against the field."""

    rule: QuickRule


RuleBinding = Union[DeclaredBinding, QuickBinding]


def sequence_of(binding: RuleBinding) -> int:
    return binding.rule.sequence


class ValidationContext:
    """Shared state rules may consult while validating.

    Holds the validator's field rule map once it has been built, so
    rules such as ConfirmPassword can read the value of another field.
    """

    def __init__(self) -> None:
        self.field_rule_map: dict[InputField, list[RuleBinding]] = {}

    def bindings_for(self, kind: type[RuleDeclaration]) -> list[tuple[InputField, DeclaredBinding]]:
        """All fields carrying a declaration of the given kind, in field order."""
        found = []
        for field, bindings in self.field_rule_map.items():
            for binding in bindings:
                if isinstance(binding, DeclaredBinding) and type(binding.rule.declaration) is kind:
                    found.append((field, binding))
        return found

    def data_of(self, kind: type[RuleDeclaration]) -> Any:
        """Adapted value of the first field carrying a declaration of `kind`.

        Raises:
            ConfigurationError: If no field carries such a declaration
            ConversionError: If the field's value cannot be adapted
        """
        found = self.bindings_for(kind)
        if not found:
            raise ConfigurationError(
                f"No field carries a '{kind.__name__}' declaration."
            )
        field, binding = found[0]
        if binding.adapter is None:
            return field
        return binding.adapter(field)
