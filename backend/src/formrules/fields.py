"""Input fields that can carry validation rules.

`InputField` is the interface the engine consumes: a visibility/enabled
predicate supplied by the host. The stock field kinds below are plain
in-memory models; UI toolkits bind their widgets to them or subclass
InputField directly.
"""

from __future__ import annotations

from typing import Any, Sequence


class InputField:
    """Base class for anything a controller exposes for validation.

    Fields are hashed by identity, so two fields holding the same value
    are still distinct entries in a validator's rule map.
    """

    def __init__(self, name: str | None = None, *, visible: bool = True, enabled: bool = True):
        self.name = name
        self.visible = visible
        self.enabled = enabled

    def is_visible(self) -> bool:
        return self.visible

    def is_enabled(self) -> bool:
        return self.enabled

    __hash__ = object.__hash__

    def __eq__(self, other: object) -> bool:
        return self is other

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class TextInput(InputField):
    """A single-line or multi-line text entry."""

    def __init__(self, name: str | None = None, text: str = "", **kwargs: Any):
        super().__init__(name, **kwargs)
        self.text = text


class CheckBox(InputField):
    def __init__(self, name: str | None = None, checked: bool = False, **kwargs: Any):
        super().__init__(name, **kwargs)
        self.checked = checked


class RadioButton(InputField):
    def __init__(self, name: str | None = None, checked: bool = False, **kwargs: Any):
        super().__init__(name, **kwargs)
        self.checked = checked


class Spinner(InputField):
    """A drop-down selection; `selected_index` is -1 when nothing is selected."""

    def __init__(
        self,
        name: str | None = None,
        items: Sequence[Any] = (),
        selected_index: int = -1,
        **kwargs: Any,
    ):
        super().__init__(name, **kwargs)
        self.items = list(items)
        self.selected_index = selected_index
