"""Rule and adapter registry for formrules.

Provides registration and lookup for:
- Declaration kinds the validator recognizes on controller fields
- Adapters converting a field type into the data type a rule expects

A registry is an explicit object: build one at application startup with
create_default_registry(), add custom declarations and adapters to it,
and hand it to every Validator.
"""

import logging
from typing import Any

from formrules.adapters import (
    TEXT_ADAPTERS,
    Adapter,
    adapter_data_type,
    checkbox_to_bool,
    radio_to_bool,
    spinner_to_index,
)
from formrules.declarations import (
    BOOLEAN_DECLARATIONS,
    TEXT_DECLARATIONS,
    RuleDeclaration,
    Select,
)
from formrules.errors import ConfigurationError, require
from formrules.fields import CheckBox, RadioButton, Spinner, TextInput

logger = logging.getLogger(__name__)

DeclarationKind = type[RuleDeclaration]


class RuleRegistry:
    """Registry for declaration kinds and adapters.

    Entries accumulate: re-registering a key replaces the previous value
    (last write wins) and nothing is ever removed.

    Example:
        registry = create_default_registry()

        # A custom declaration on text fields
        registry.register_rule(PostalCode)

        # A custom field type
        registry.register_adapter(RatingBar, rating_to_float, DecimalMin, DecimalMax)
    """

    def __init__(self) -> None:
        # kind -> field type -> adapter
        self._bindings: dict[DeclarationKind, dict[type, Adapter]] = {}
        # (field type, data type) -> adapter
        self._adapters: dict[tuple[type, type], Adapter] = {}
        self._recognized: set[DeclarationKind] = set()

    def register_rule(self, kind: DeclarationKind) -> DeclarationKind:
        """Recognize a declaration kind on controller fields.

        If a stock text adapter produces the rule's data type, the kind is
        bound to TextInput fields as well. Returns the kind, so this works
        as a class decorator.

        Raises:
            ConfigurationError: If the declaration names no rule implementation
        """
        require(kind, "kind")
        if getattr(kind, "rule_class", None) is None:
            raise ConfigurationError(
                f"'{kind.__name__}' does not name a rule implementation, "
                "set its 'rule_class' attribute."
            )

        data_type = kind.rule_class.data_type
        if data_type in TEXT_ADAPTERS:
            self._bind(kind, TextInput, TEXT_ADAPTERS[data_type])
        self._recognized.add(kind)
        return kind

    def register_adapter(
        self,
        field_type: type,
        adapter: Adapter,
        *kinds: DeclarationKind,
        data_type: type | None = None,
    ) -> None:
        """Register an adapter for a field type.

        Args:
            field_type: The field class the adapter reads
            adapter: Callable converting a field into `data_type`
            kinds: Declaration kinds to bind to this field type and recognize
            data_type: Type the adapter produces; inferred from the adapter's
                return annotation when omitted

        Raises:
            ConfigurationError: If an argument is None or the data type
                cannot be inferred
        """
        require(field_type, "field_type")
        require(adapter, "adapter")
        if data_type is None:
            data_type = adapter_data_type(adapter)

        key = (field_type, data_type)
        if key in self._adapters and self._adapters[key] is not adapter:
            logger.warning(
                "Replacing adapter for %s -> %s",
                field_type.__name__,
                data_type.__name__,
            )
        self._adapters[key] = adapter

        for kind in kinds:
            require(kind, "kind")
            self._bind(kind, field_type, adapter)
            self._recognized.add(kind)

    def is_recognized(self, kind: Any) -> bool:
        """Check if a declaration kind is registered."""
        return kind in self._recognized

    def list_recognized(self) -> list[str]:
        """List all recognized declaration kind names."""
        return sorted(kind.__name__ for kind in self._recognized)

    def resolve_adapter(
        self,
        kind: DeclarationKind,
        field_type: type,
        data_type: type,
    ) -> Adapter | None:
        """Find the adapter feeding a declaration on a field type.

        Checks the kind's own bindings first, then adapters registered
        for (field type, data type). Both lookups walk the field type's
        base classes, nearest first.
        """
        bindings = self._bindings.get(kind, {})
        for candidate in field_type.__mro__:
            if candidate in bindings:
                return bindings[candidate]

        for candidate in field_type.__mro__:
            adapter = self._adapters.get((candidate, data_type))
            if adapter is not None:
                return adapter

        return None

    def _bind(self, kind: DeclarationKind, field_type: type, adapter: Adapter) -> None:
        self._bindings.setdefault(kind, {})[field_type] = adapter


def register_builtins(registry: RuleRegistry) -> None:
    """Register the stock field kinds and declarations."""
    registry.register_adapter(CheckBox, checkbox_to_bool, *BOOLEAN_DECLARATIONS)
    registry.register_adapter(RadioButton, radio_to_bool, *BOOLEAN_DECLARATIONS)
    registry.register_adapter(Spinner, spinner_to_index, Select)

    for data_type, adapter in TEXT_ADAPTERS.items():
        registry.register_adapter(TextInput, adapter, data_type=data_type)
    for kind in TEXT_DECLARATIONS:
        registry.register_rule(kind)


def create_default_registry() -> RuleRegistry:
    """Create a registry holding the built-in bindings."""
    registry = RuleRegistry()
    register_builtins(registry)
    return registry
