"""Stock adapters converting field state into rule data.

An adapter is any callable `(field) -> DataType`. Its return annotation is
the data type the registry files it under, so custom adapters must be
annotated. Adapters raise ConversionError when the field's current value
cannot be converted.
"""

from __future__ import annotations

import inspect
import typing
from typing import Any, Callable

from formrules.errors import ConfigurationError, ConversionError
from formrules.fields import CheckBox, RadioButton, Spinner, TextInput

Adapter = Callable[[Any], Any]


def checkbox_to_bool(field: CheckBox) -> bool:
    return field.checked


def radio_to_bool(field: RadioButton) -> bool:
    return field.checked


def spinner_to_index(field: Spinner) -> int:
    return field.selected_index


def text_to_str(field: TextInput) -> str:
    return field.text


def text_to_int(field: TextInput) -> int:
    text = field.text.strip()
    try:
        return int(text)
    except ValueError as e:
        raise ConversionError(f"Expected an integer value, but was '{text}'.") from e


def text_to_float(field: TextInput) -> float:
    text = field.text.strip()
    try:
        return float(text)
    except ValueError as e:
        raise ConversionError(f"Expected a decimal value, but was '{text}'.") from e


# Stock text adapters, keyed by the data type they produce
TEXT_ADAPTERS: dict[type, Adapter] = {
    str: text_to_str,
    int: text_to_int,
    float: text_to_float,
}


def adapter_data_type(adapter: Adapter) -> type:
    """Infer the data type an adapter produces from its return annotation.

    Works for plain functions and for instances of classes defining
    `__call__`.

    Raises:
        ConfigurationError: If the adapter has no return annotation
    """
    target = adapter if inspect.isroutine(adapter) else type(adapter).__call__
    try:
        hints = typing.get_type_hints(target)
    except (NameError, TypeError) as e:
        raise ConfigurationError(
            f"Unable to read the return type of adapter {adapter!r}: {e}"
        ) from e

    data_type = hints.get("return")
    if data_type is None or not isinstance(data_type, type):
        raise ConfigurationError(
            f"Adapter {adapter!r} must declare a concrete return type annotation."
        )
    return data_type
