"""Exceptions raised by the formrules validation engine.

Two kinds of errors exist:
- ConfigurationError: programmer misuse, raised synchronously at the call site
- ConversionError: an adapter could not produce the data a rule expects

Rule failures are not exceptions; they are reported through the listener.
"""


class ConfigurationError(Exception):
    """Raised when the validator, registry or controller is misconfigured.

    Configuration errors abort the call before any rule runs and never
    reach the validation listener.
    """


class ConversionError(Exception):
    """Raised by an adapter when a field's value cannot be converted.

    The engine downgrades this to a failure of the rule that needed the
    converted value.
    """


def require(value: object, argument_name: str) -> None:
    """Raise ConfigurationError if a required argument is None."""
    if value is None:
        raise ConfigurationError(f"'{argument_name}' cannot be None.")
