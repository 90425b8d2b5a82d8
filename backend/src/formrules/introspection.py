"""Field discovery for controller objects.

A controller declares its fields as class annotations. Fields whose type
is an InputField subclass and that carry an Order marker or at least one
recognized declaration take part in validation:

    class LoginForm:
        username: Annotated[TextInput, Order(1), NotEmpty()]
        password: Annotated[TextInput, Order(2), Password(min=8)]
        remember: CheckBox  # no declarations, ignored
"""

from __future__ import annotations

import inspect
import typing
from dataclasses import dataclass, field
from typing import Annotated, Any

from formrules.declarations import Order, RuleDeclaration
from formrules.errors import ConfigurationError
from formrules.fields import InputField
from formrules.registry import RuleRegistry
from formrules.rules.base import UNSEQUENCED


@dataclass(frozen=True)
class FieldSpec:
    """A controller attribute that carries validation metadata.

    Attributes:
        name: Attribute name on the controller
        field_type: Declared InputField subclass
        declarations: Recognized declarations, in declaration order
        order: The field's Order marker, if any
        owner: The class that declares the attribute
    """

    name: str
    field_type: type[InputField]
    declarations: tuple[RuleDeclaration, ...] = ()
    order: Order | None = None
    owner: type | None = None

    @property
    def sequence(self) -> int | None:
        """Explicit position of the field, or None if it has none.

        The Order marker wins; otherwise a sole declaration with an
        explicit sequence positions the field.
        """
        if self.order is not None:
            return self.order.value
        if len(self.declarations) == 1 and self.declarations[0].sequence != UNSEQUENCED:
            return self.declarations[0].sequence
        return None


@dataclass
class FieldSpecs:
    """Kept field specs in validation order, plus whether they are ordered."""

    specs: list[FieldSpec] = field(default_factory=list)
    ordered: bool = False


def _annotation_parts(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split `Annotated[T, *metadata]` into (T, metadata)."""
    if typing.get_origin(annotation) is Annotated:
        return annotation.__origin__, tuple(annotation.__metadata__)
    return annotation, ()


def _is_field_type(candidate: Any) -> bool:
    return isinstance(candidate, type) and issubclass(candidate, InputField)


def collect_field_specs(controller_type: type, registry: RuleRegistry) -> FieldSpecs:
    """Find, filter and sort the validated fields of a controller class.

    Annotations are read from the class itself first, then from each
    ancestor up to (not including) `object`.
    """
    discovered: list[FieldSpec] = []
    seen: set[str] = set()

    for klass in controller_type.__mro__:
        if klass is object:
            continue
        annotations = inspect.get_annotations(klass, eval_str=True)
        for name, annotation in annotations.items():
            if name in seen:
                continue
            field_type, metadata = _annotation_parts(annotation)
            if not _is_field_type(field_type):
                continue
            seen.add(name)

            order = next((item for item in metadata if isinstance(item, Order)), None)
            declarations = tuple(
                item for item in metadata
                if isinstance(item, RuleDeclaration) and registry.is_recognized(type(item))
            )
            if order is None and not declarations:
                continue

            discovered.append(
                FieldSpec(
                    name=name,
                    field_type=field_type,
                    declarations=declarations,
                    order=order,
                    owner=klass,
                )
            )

    sequenced = sorted(
        (spec for spec in discovered if spec.sequence is not None),
        key=lambda spec: spec.sequence,
    )
    unsequenced = [spec for spec in discovered if spec.sequence is None]

    if len(discovered) == 1:
        ordered = discovered[0].order is not None
    else:
        ordered = bool(discovered) and not unsequenced

    return FieldSpecs(specs=sequenced + unsequenced, ordered=ordered)


def resolve_field(controller: Any, spec: FieldSpec) -> InputField:
    """Read a field spec's value from the controller instance.

    Raises:
        ConfigurationError: If the attribute is missing or None
    """
    value = getattr(controller, spec.name, None)
    if value is None:
        raise ConfigurationError(f"'{spec.field_type.__name__} {spec.name}' is None.")
    if not isinstance(value, InputField):
        raise ConfigurationError(
            f"'{spec.name}' is declared as {spec.field_type.__name__} "
            f"but holds {type(value).__name__}."
        )
    return value
