"""Errors raised while registering API codes or building response envelopes.

These are programmer/integration errors, never transient faults: they are
raised synchronously to the caller and nothing in the package catches them.
The FastAPI exception handlers in main.py turn any that escape a request
into the standard 500 envelope.
"""


class ResponseBuilderError(Exception):
    """Base class for all response builder exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidArgumentTypeError(ResponseBuilderError, TypeError):
    """Raised when an argument has a type the builder does not accept."""

    def __init__(self, argument: str, value: object, expected: str) -> None:
        self.argument = argument
        self.value = value
        super().__init__(
            f"{argument} must be {expected}, got {type(value).__name__}: {value!r}"
        )


class InvalidConfigurationTypeError(ResponseBuilderError, TypeError):
    """Raised when a configuration value has the wrong type."""

    def __init__(self, key: str, value: object) -> None:
        self.key = key
        self.value = value
        super().__init__(
            f"configuration key {key!r} must be a non-negative integer bitmask, "
            f"got {type(value).__name__}: {value!r}"
        )


class CodeOutOfBoundsError(ResponseBuilderError, ValueError):
    """Raised when an API code falls outside [0, max_code]."""

    def __init__(self, code: int, max_code: int) -> None:
        self.code = code
        self.max_code = max_code
        super().__init__(f"API code {code} is outside the allowed range [0, {max_code}]")


class UnknownCodeError(ResponseBuilderError, LookupError):
    """Raised when an API code has no registered message template."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"API code {code} has no registered message")


class DuplicateCodeError(ResponseBuilderError):
    """Raised when registering a reserved code or a code that is already taken."""

    def __init__(self, code: int, reason: str) -> None:
        self.code = code
        super().__init__(f"API code {code} cannot be registered: {reason}")


class RegistryFrozenError(ResponseBuilderError):
    """Raised when registering codes after the registry has been frozen."""


class InvalidHttpStatusError(ResponseBuilderError, ValueError):
    """Raised when an HTTP status contradicts the success flag."""

    def __init__(self, http_status: int, success: bool) -> None:
        self.http_status = http_status
        self.success = success
        expected = "in 200-299" if success else ">= 400"
        kind = "success" if success else "error"
        super().__init__(f"HTTP status {http_status} is invalid for {kind} (expected {expected})")
