"""Stock rules backing the built-in declarations.

Each rule reads its parameters from the declaration it was created from.
See formrules.declarations for the declaration side.
"""

from __future__ import annotations

import ipaddress
import re
from dataclasses import asdict
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from formrules.errors import ConfigurationError
from formrules.rules.base import DeclarativeRule, ValidationContext


# =============================================================================
# Patterns
# =============================================================================

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

LOCAL_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9-]+$")

DOMAIN_PATTERN = re.compile(
    r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,63}$"
)

LOCAL_DOMAIN_PATTERN = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?$")


class PasswordScheme(Enum):
    """Character classes a password must contain."""

    ANY = r".+"
    ALPHA = r"\w*[a-zA-Z]+\w*"
    ALPHA_MIXED_CASE = r"(?=.*[a-z])(?=.*[A-Z]).+"
    NUMERIC = r"\d+"
    ALPHA_NUMERIC = r"(?=.*[a-zA-Z])(?=.*\d).+"
    ALPHA_NUMERIC_MIXED_CASE = r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d).+"
    ALPHA_NUMERIC_SYMBOLS = r"(?=.*[a-zA-Z])(?=.*\d)(?=.*[^a-zA-Z0-9]).+"
    ALPHA_NUMERIC_MIXED_CASE_SYMBOLS = r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^a-zA-Z0-9]).+"


class CardType(Enum):
    """Card networks with their number prefixes and valid lengths."""

    AMEX = (r"3[47]", (15,))
    DINERS = (r"3(?:0[0-5]|[68])", (14,))
    DISCOVER = (r"6(?:011|5)", (16,))
    MASTERCARD = (r"5[1-5]|2[2-7]", (16,))
    VISA = (r"4", (13, 16, 19))

    def __init__(self, prefix: str, lengths: tuple[int, ...]):
        self.prefix = re.compile(prefix)
        self.lengths = lengths

    def matches(self, number: str) -> bool:
        return len(number) in self.lengths and self.prefix.match(number) is not None


def luhn_checksum_valid(number: str) -> bool:
    total = 0
    for position, char in enumerate(reversed(number)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


# =============================================================================
# Base
# =============================================================================


class StockRule(DeclarativeRule):
    """Stock rules format their default message with the declaration's fields."""

    def get_message(self) -> str:
        if self.declaration.message:
            return self.declaration.message
        return self.default_message.format(**asdict(self.declaration))


# =============================================================================
# Text Rules
# =============================================================================


class NotEmptyRule(StockRule):
    default_message = "This field is required"

    def is_valid(self, data: str) -> bool:
        text = data.strip() if self.declaration.trim else data
        return len(text) > 0


class PatternRule(StockRule):
    default_message = "Invalid format"

    def __init__(self, declaration, context):
        super().__init__(declaration, context)
        flags = 0 if declaration.case_sensitive else re.IGNORECASE
        self._pattern = re.compile(declaration.regex, flags)

    def is_valid(self, data: str) -> bool:
        return self._pattern.fullmatch(data) is not None


class SizeRule(StockRule):
    default_message = "Invalid length"

    def is_valid(self, data: str) -> bool:
        length = len(data.strip() if self.declaration.trim else data)
        if self.declaration.min is not None and length < self.declaration.min:
            return False
        if self.declaration.max is not None and length > self.declaration.max:
            return False
        return True


class EmailRule(StockRule):
    default_message = "Invalid email"

    def is_valid(self, data: str) -> bool:
        if EMAIL_PATTERN.match(data):
            return True
        return self.declaration.allow_local and LOCAL_EMAIL_PATTERN.match(data) is not None


class DomainRule(StockRule):
    default_message = "Invalid domain"

    def is_valid(self, data: str) -> bool:
        if len(data) <= 253 and DOMAIN_PATTERN.match(data):
            return True
        return self.declaration.allow_local and LOCAL_DOMAIN_PATTERN.match(data) is not None


class UrlRule(StockRule):
    default_message = "Invalid URL"

    def is_valid(self, data: str) -> bool:
        if not data or any(char.isspace() for char in data):
            return False
        try:
            parts = urlsplit(data)
        except ValueError:
            return False
        if parts.scheme.lower() not in self.declaration.schemes:
            return False
        if not parts.netloc:
            return False
        if parts.fragment and not self.declaration.allow_fragments:
            return False
        return True


class IpAddressRule(StockRule):
    default_message = "Invalid IP address"

    def is_valid(self, data: str) -> bool:
        try:
            address = ipaddress.ip_address(data)
        except ValueError:
            return False
        version = self.declaration.version
        if version == "ipv4":
            return address.version == 4
        if version == "ipv6":
            return address.version == 6
        return True


class CreditCardRule(StockRule):
    default_message = "Invalid card"

    def is_valid(self, data: str) -> bool:
        number = re.sub(r"[\s-]", "", data)
        if not number.isdigit():
            return False
        if not luhn_checksum_valid(number):
            return False
        return any(card_type.matches(number) for card_type in self.declaration.card_types)


class IsbnRule(StockRule):
    default_message = "Invalid ISBN"

    def is_valid(self, data: str) -> bool:
        isbn = re.sub(r"[\s-]", "", data).upper()
        if len(isbn) == 10:
            return self._isbn10_valid(isbn)
        if len(isbn) == 13:
            return self._isbn13_valid(isbn)
        return False

    def _isbn10_valid(self, isbn: str) -> bool:
        if not isbn[:9].isdigit() or not (isbn[9].isdigit() or isbn[9] == "X"):
            return False
        total = sum((10 - i) * int(char) for i, char in enumerate(isbn[:9]))
        total += 10 if isbn[9] == "X" else int(isbn[9])
        return total % 11 == 0

    def _isbn13_valid(self, isbn: str) -> bool:
        if not isbn.isdigit():
            return False
        total = sum(int(char) * (1 if i % 2 == 0 else 3) for i, char in enumerate(isbn))
        return total % 10 == 0


class PasswordRule(StockRule):
    default_message = "Invalid password"

    def __init__(self, declaration, context):
        super().__init__(declaration, context)
        self._pattern = re.compile(declaration.scheme.value, re.DOTALL)

    def is_valid(self, data: str) -> bool:
        if len(data) < self.declaration.min:
            return False
        return self._pattern.fullmatch(data) is not None


class ConfirmRule(StockRule):
    """Compares the value against the field carrying the counterpart declaration."""

    def verify(self, context: ValidationContext) -> None:
        counterpart = self.declaration.counterpart
        if not context.bindings_for(counterpart):
            raise ConfigurationError(
                f"A field must carry a '{counterpart.__name__}' declaration to use "
                f"'{type(self.declaration).__name__}'."
            )

    def is_valid(self, data: str) -> bool:
        return data == self.context.data_of(self.declaration.counterpart)


class ConfirmPasswordRule(ConfirmRule):
    default_message = "Passwords don't match"


class ConfirmEmailRule(ConfirmRule):
    default_message = "Email addresses don't match"


# =============================================================================
# Numeric Rules
# =============================================================================


class MinRule(StockRule):
    data_type = int
    default_message = "Should be greater than or equal to {value}"

    def is_valid(self, data: int) -> bool:
        return data >= self.declaration.value


class MaxRule(StockRule):
    data_type = int
    default_message = "Should be less than or equal to {value}"

    def is_valid(self, data: int) -> bool:
        return data <= self.declaration.value


class DecimalMinRule(StockRule):
    data_type = float
    default_message = "Should be greater than {value}"

    def is_valid(self, data: float) -> bool:
        if self.declaration.inclusive:
            return data >= self.declaration.value
        return data > self.declaration.value


class DecimalMaxRule(StockRule):
    data_type = float
    default_message = "Should be less than {value}"

    def is_valid(self, data: float) -> bool:
        if self.declaration.inclusive:
            return data <= self.declaration.value
        return data < self.declaration.value


# =============================================================================
# Boolean and Selection Rules
# =============================================================================


class CheckedRule(StockRule):
    data_type = bool
    default_message = "Check this field"

    def is_valid(self, data: bool) -> bool:
        return data == self.declaration.value


class AssertTrueRule(StockRule):
    data_type = bool
    default_message = "Must be true"

    def is_valid(self, data: bool) -> bool:
        return data is True


class AssertFalseRule(StockRule):
    data_type = bool
    default_message = "Must be false"

    def is_valid(self, data: bool) -> bool:
        return data is False


class SelectRule(StockRule):
    data_type = int
    default_message = "Select a value"

    def is_valid(self, data: Any) -> bool:
        return data >= 0 and data != self.declaration.default_selection
