"""formrules: declarative validation for input fields.

A controller declares its fields with rule declarations; a Validator
discovers them, builds an ordered rule set per field and reports the
outcome to a listener, synchronously or on a worker thread.

Usage:
    from typing import Annotated

    from formrules import (
        Email, NotEmpty, Order, TextInput, Validator, create_default_registry,
    )

    class SignUpForm:
        name: Annotated[TextInput, Order(1), NotEmpty()]
        email: Annotated[TextInput, Order(2), NotEmpty(), Email()]

    # At application startup
    registry = create_default_registry()

    validator = Validator(SignUpForm(...), registry)
    validator.set_listener(listener)
    validator.validate()
"""

from formrules.config import ValidatorSettings
from formrules.declarations import (
    AssertFalse,
    AssertTrue,
    Checked,
    ConfirmEmail,
    ConfirmPassword,
    CreditCard,
    DecimalMax,
    DecimalMin,
    Domain,
    Email,
    IpAddress,
    Isbn,
    Max,
    Min,
    NotEmpty,
    Order,
    Password,
    Pattern,
    RuleDeclaration,
    Select,
    Size,
    Url,
)
from formrules.dispatch import AsyncioDispatcher, CallbackDispatcher, InlineDispatcher
from formrules.errors import ConfigurationError, ConversionError
from formrules.fields import CheckBox, InputField, RadioButton, Spinner, TextInput
from formrules.registry import RuleRegistry, create_default_registry, register_builtins
from formrules.rules import (
    CardType,
    DeclarativeRule,
    PasswordScheme,
    QuickRule,
    Rule,
    ValidationContext,
)
from formrules.tasks import ValidationTask
from formrules.types import (
    FieldValidatedAction,
    Mode,
    ValidationError,
    ValidationListener,
    ValidationReport,
)
from formrules.validator import Validator

__all__ = [
    # Types
    "FieldValidatedAction",
    "Mode",
    "ValidationError",
    "ValidationListener",
    "ValidationReport",
    # Errors
    "ConfigurationError",
    "ConversionError",
    # Fields
    "CheckBox",
    "InputField",
    "RadioButton",
    "Spinner",
    "TextInput",
    # Declarations
    "AssertFalse",
    "AssertTrue",
    "Checked",
    "ConfirmEmail",
    "ConfirmPassword",
    "CreditCard",
    "DecimalMax",
    "DecimalMin",
    "Domain",
    "Email",
    "IpAddress",
    "Isbn",
    "Max",
    "Min",
    "NotEmpty",
    "Order",
    "Password",
    "Pattern",
    "RuleDeclaration",
    "Select",
    "Size",
    "Url",
    # Rules
    "CardType",
    "DeclarativeRule",
    "PasswordScheme",
    "QuickRule",
    "Rule",
    "ValidationContext",
    # Registry
    "RuleRegistry",
    "create_default_registry",
    "register_builtins",
    # Execution
    "AsyncioDispatcher",
    "CallbackDispatcher",
    "InlineDispatcher",
    "ValidationTask",
    "Validator",
    "ValidatorSettings",
]
