"""Rule declarations and the Order marker.

Declarations are attached to controller fields with `typing.Annotated`:

    class SignUpForm:
        email: Annotated[TextInput, Order(1), NotEmpty(sequence=1), Email(sequence=2)]
        password: Annotated[TextInput, Order(2), Password(min=8)]
        confirm: Annotated[TextInput, Order(3), ConfirmPassword()]

A declaration names its rule implementation through `rule_class`; the
rule's `data_type` is the type of value the declaration expects. Custom
declarations subclass RuleDeclaration and must be registered with a
RuleRegistry before the controller is validated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from formrules.rules import stock
from formrules.rules.base import UNSEQUENCED, DeclarativeRule
from formrules.rules.stock import CardType, PasswordScheme


@dataclass(frozen=True)
class Order:
    """Gives a field an explicit position, independent of its declarations."""

    value: int


@dataclass(frozen=True, kw_only=True)
class RuleDeclaration:
    """Base class for rule declarations.

    Attributes:
        sequence: Position of the rule within its field's rule set (-1 if unsequenced)
        message: Overrides the rule's default failure message
    """

    rule_class: ClassVar[type[DeclarativeRule] | None] = None

    sequence: int = UNSEQUENCED
    message: str | None = None

    @property
    def data_type(self) -> type | None:
        """Type of value the declared rule validates (None: the field itself)."""
        if self.rule_class is None:
            return None
        return self.rule_class.data_type


# =============================================================================
# Text Declarations
# =============================================================================


@dataclass(frozen=True)
class NotEmpty(RuleDeclaration):
    rule_class = stock.NotEmptyRule

    trim: bool = False


@dataclass(frozen=True)
class Pattern(RuleDeclaration):
    rule_class = stock.PatternRule

    regex: str
    case_sensitive: bool = True


@dataclass(frozen=True)
class Size(RuleDeclaration):
    rule_class = stock.SizeRule

    min: int | None = None
    max: int | None = None
    trim: bool = False


@dataclass(frozen=True)
class Email(RuleDeclaration):
    rule_class = stock.EmailRule

    allow_local: bool = False


@dataclass(frozen=True)
class Domain(RuleDeclaration):
    rule_class = stock.DomainRule

    allow_local: bool = False


@dataclass(frozen=True)
class Url(RuleDeclaration):
    rule_class = stock.UrlRule

    schemes: tuple[str, ...] = ("http", "https", "ftp")
    allow_fragments: bool = True


@dataclass(frozen=True)
class IpAddress(RuleDeclaration):
    rule_class = stock.IpAddressRule

    version: str = "any"  # "any" | "ipv4" | "ipv6"


@dataclass(frozen=True)
class CreditCard(RuleDeclaration):
    rule_class = stock.CreditCardRule

    card_types: tuple[CardType, ...] = tuple(CardType)


@dataclass(frozen=True)
class Isbn(RuleDeclaration):
    rule_class = stock.IsbnRule


@dataclass(frozen=True)
class Password(RuleDeclaration):
    rule_class = stock.PasswordRule

    min: int = 6
    scheme: PasswordScheme = PasswordScheme.ANY


@dataclass(frozen=True)
class ConfirmPassword(RuleDeclaration):
    rule_class = stock.ConfirmPasswordRule
    counterpart: ClassVar[type[RuleDeclaration]] = Password


@dataclass(frozen=True)
class ConfirmEmail(RuleDeclaration):
    rule_class = stock.ConfirmEmailRule
    counterpart: ClassVar[type[RuleDeclaration]] = Email


# =============================================================================
# Numeric Declarations
# =============================================================================


@dataclass(frozen=True)
class Min(RuleDeclaration):
    rule_class = stock.MinRule

    value: int


@dataclass(frozen=True)
class Max(RuleDeclaration):
    rule_class = stock.MaxRule

    value: int


@dataclass(frozen=True)
class DecimalMin(RuleDeclaration):
    rule_class = stock.DecimalMinRule

    value: float
    inclusive: bool = True


@dataclass(frozen=True)
class DecimalMax(RuleDeclaration):
    rule_class = stock.DecimalMaxRule

    value: float
    inclusive: bool = True


# =============================================================================
# Boolean and Selection Declarations
# =============================================================================


@dataclass(frozen=True)
class Checked(RuleDeclaration):
    rule_class = stock.CheckedRule

    value: bool = True


@dataclass(frozen=True)
class AssertTrue(RuleDeclaration):
    rule_class = stock.AssertTrueRule


@dataclass(frozen=True)
class AssertFalse(RuleDeclaration):
    rule_class = stock.AssertFalseRule


@dataclass(frozen=True)
class Select(RuleDeclaration):
    rule_class = stock.SelectRule

    default_selection: int = 0


TEXT_DECLARATIONS: tuple[type[RuleDeclaration], ...] = (
    NotEmpty, Pattern, Size, Email, Domain, Url, IpAddress, CreditCard,
    Isbn, Password, ConfirmPassword, ConfirmEmail,
    Min, Max, DecimalMin, DecimalMax,
)

BOOLEAN_DECLARATIONS: tuple[type[RuleDeclaration], ...] = (Checked, AssertTrue, AssertFalse)
