"""Rules for formrules.

Declarative rules are created from declarations on controller fields;
quick rules are attached ad hoc to a validator.
"""

from formrules.rules.base import (
    UNSEQUENCED,
    DeclarativeRule,
    DeclaredBinding,
    QuickBinding,
    QuickRule,
    Rule,
    RuleBinding,
    ValidationContext,
)
from formrules.rules.stock import CardType, PasswordScheme

__all__ = [
    "UNSEQUENCED",
    "CardType",
    "DeclarativeRule",
    "DeclaredBinding",
    "PasswordScheme",
    "QuickBinding",
    "QuickRule",
    "Rule",
    "RuleBinding",
    "ValidationContext",
]
