"""Controllers, listeners and rules shared by the formrules tests."""

import threading
from typing import Annotated

from formrules import (
    Checked,
    ConfirmPassword,
    DecimalMin,
    Email,
    InputField,
    Min,
    NotEmpty,
    Order,
    Password,
    Pattern,
    QuickRule,
    RuleRegistry,
    Select,
    Size,
    Spinner,
    CheckBox,
    TextInput,
    ValidationError,
    create_default_registry,
)


# =============================================================================
# Listeners
# =============================================================================


class RecordingListener:
    """Records validation outcomes."""

    def __init__(self):
        self.succeeded = 0
        self.failures: list[list[ValidationError]] = []
        self.threads: list[int] = []
        self.delivered = threading.Event()

    def on_succeeded(self):
        self.succeeded += 1
        self.threads.append(threading.get_ident())
        self.delivered.set()

    def on_failed(self, errors):
        self.failures.append(errors)
        self.threads.append(threading.get_ident())
        self.delivered.set()

    @property
    def calls(self) -> int:
        return self.succeeded + len(self.failures)


class RecordingAction:
    """Records fields whose rules all passed."""

    def __init__(self):
        self.fields: list[InputField] = []
        self.threads: list[int] = []

    def on_all_rules_passed(self, field):
        self.fields.append(field)
        self.threads.append(threading.get_ident())


# =============================================================================
# Quick Rules
# =============================================================================


class CountingRule(QuickRule):
    """Counts evaluations and returns a fixed outcome."""

    def __init__(self, outcome: bool = True, sequence: int = -1):
        super().__init__(sequence)
        self.outcome = outcome
        self.calls = 0

    def is_valid(self, field):
        self.calls += 1
        return self.outcome


class BlockingRule(QuickRule):
    """Blocks evaluation until `gate` is set."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.gate = threading.Event()

    def is_valid(self, field):
        self.started.set()
        self.gate.wait(timeout=5)
        return True


# =============================================================================
# Controllers
# =============================================================================


class OrderedForm:
    first: Annotated[TextInput, Order(1), NotEmpty()]
    second: Annotated[TextInput, Order(2), NotEmpty()]
    third: Annotated[TextInput, Order(3), NotEmpty()]

    def __init__(self, first: str = "", second: str = "", third: str = ""):
        self.first = TextInput("first", first)
        self.second = TextInput("second", second)
        self.third = TextInput("third", third)


class UnorderedForm:
    name: Annotated[TextInput, NotEmpty()]
    email: Annotated[TextInput, NotEmpty(), Email()]

    def __init__(self, name: str = "", email: str = ""):
        self.name = TextInput("name", name)
        self.email = TextInput("email", email)


class SequencedForm:
    code: Annotated[
        TextInput,
        Order(1),
        Size(min=10, sequence=3),
        NotEmpty(sequence=1),
        Pattern(r"\d+", sequence=2),
    ]

    def __init__(self, code: str = ""):
        self.code = TextInput("code", code)


class SignUpForm:
    email: Annotated[TextInput, Order(1), NotEmpty(), Email()]
    password: Annotated[TextInput, Order(2), Password(min=6)]
    confirm: Annotated[TextInput, Order(3), ConfirmPassword()]
    age: Annotated[TextInput, Order(4), Min(18)]
    country: Annotated[Spinner, Order(5), Select()]
    terms: Annotated[CheckBox, Order(6), Checked(message="Accept the terms")]

    def __init__(
        self,
        email: str = "jane@example.com",
        password: str = "secret1",
        confirm: str = "secret1",
        age: str = "30",
        country: int = 1,
        terms: bool = True,
    ):
        self.email = TextInput("email", email)
        self.password = TextInput("password", password)
        self.confirm = TextInput("confirm", confirm)
        self.age = TextInput("age", age)
        self.country = Spinner("country", ["--", "NL", "IN"], selected_index=country)
        self.terms = CheckBox("terms", terms)


class EmptyForm:
    notes: TextInput

    def __init__(self, notes: str = ""):
        self.notes = TextInput("notes", notes)


class RatingBar(InputField):
    def __init__(self, name: str | None = None, rating: float = 0.0, **kwargs):
        super().__init__(name, **kwargs)
        self.rating = rating


def rating_to_float(field: RatingBar) -> float:
    return field.rating


class RatingForm:
    rating: Annotated[RatingBar, Order(1), DecimalMin(3.0)]

    def __init__(self, rating: float = 0.0):
        self.rating = RatingBar("rating", rating)


def build_registry() -> RuleRegistry:
    """Default registry plus the RatingBar adapter."""
    registry = create_default_registry()
    registry.register_adapter(RatingBar, rating_to_float)
    return registry
