"""API code registry.

API codes are integers carried in every envelope, independent of the HTTP
status. The legal space [0, max_code] is split in two:

- reserved range [0, RESERVED_MAX_CODE]: system codes owned by this package
  (``BaseApiCode``). They ship with built-in templates and cannot be
  overridden.
- user range (RESERVED_MAX_CODE, max_code]: free for the application to
  assign at startup.

Build the registry once (``ApiCodeRegistry.from_mapping``), then share it
read-only. Once frozen it never mutates, so concurrent readers need no lock.
"""

from collections.abc import Mapping
from enum import IntEnum
from typing import Self

from response_builder.exceptions import (
    CodeOutOfBoundsError,
    DuplicateCodeError,
    InvalidArgumentTypeError,
    RegistryFrozenError,
    UnknownCodeError,
)
from response_builder.logging import get_logger

logger = get_logger(__name__)

RESERVED_MAX_CODE = 19
DEFAULT_MAX_CODE = 1024


class BaseApiCode(IntEnum):
    """Reserved system codes."""

    OK = 0
    ERROR = 1
    HTTP_NOT_FOUND = 2
    SERVICE_UNAVAILABLE = 3
    HTTP_EXCEPTION = 4
    UNCAUGHT_EXCEPTION = 5
    AUTHENTICATION_EXCEPTION = 6
    VALIDATION_EXCEPTION = 7


BASE_MESSAGES: dict[int, str] = {
    BaseApiCode.OK: "OK",
    BaseApiCode.ERROR: "Error #{api_code}",
    BaseApiCode.HTTP_NOT_FOUND: "Unknown method",
    BaseApiCode.SERVICE_UNAVAILABLE: "Service maintenance in progress",
    BaseApiCode.HTTP_EXCEPTION: "HTTP exception: {message}",
    BaseApiCode.UNCAUGHT_EXCEPTION: "Uncaught exception: {message}",
    BaseApiCode.AUTHENTICATION_EXCEPTION: "Not authorized",
    BaseApiCode.VALIDATION_EXCEPTION: "Invalid data",
}


def is_api_code(value: object) -> bool:
    """True for plain ints. ``bool`` is an int subclass but never a code."""
    return isinstance(value, int) and not isinstance(value, bool)


class ApiCodeRegistry:
    """Mapping of API code to message template, with range validation."""

    def __init__(self, max_code: int = DEFAULT_MAX_CODE) -> None:
        if not is_api_code(max_code) or max_code <= RESERVED_MAX_CODE:
            raise ValueError(f"max_code must be an int greater than {RESERVED_MAX_CODE}")
        self._max_code = max_code
        self._messages: dict[int, str] = {int(code): msg for code, msg in BASE_MESSAGES.items()}
        self._frozen = False

    @classmethod
    def from_mapping(cls, mapping: Mapping[int, str], max_code: int = DEFAULT_MAX_CODE) -> Self:
        """Build a registry from the application's user codes and freeze it."""
        registry = cls(max_code)
        registry.register_many(mapping)
        registry.freeze()
        return registry

    @property
    def min_user_code(self) -> int:
        return RESERVED_MAX_CODE + 1

    @property
    def max_code(self) -> int:
        return self._max_code

    @property
    def frozen(self) -> bool:
        return self._frozen

    def is_in_range(self, code: int) -> bool:
        return is_api_code(code) and 0 <= code <= self._max_code

    def is_reserved(self, code: int) -> bool:
        return is_api_code(code) and 0 <= code <= RESERVED_MAX_CODE

    def register(self, code: int, message_template: str) -> None:
        """Add a user-range code.

        Raises:
            RegistryFrozenError: registry was already frozen.
            InvalidArgumentTypeError: code is not an int or template is not a non-empty str.
            CodeOutOfBoundsError: code outside [0, max_code].
            DuplicateCodeError: code is reserved or already registered.
        """
        if self._frozen:
            raise RegistryFrozenError(f"cannot register API code {code}: registry is frozen")
        if not is_api_code(code):
            raise InvalidArgumentTypeError("code", code, "int")
        if not isinstance(message_template, str) or not message_template:
            raise InvalidArgumentTypeError("message_template", message_template, "non-empty str")
        if not self.is_in_range(code):
            raise CodeOutOfBoundsError(code, self._max_code)
        if self.is_reserved(code):
            raise DuplicateCodeError(code, f"codes 0-{RESERVED_MAX_CODE} are reserved")
        if code in self._messages:
            raise DuplicateCodeError(code, "already registered")
        self._messages[code] = message_template

    def register_many(self, mapping: Mapping[int, str]) -> None:
        for code, message_template in mapping.items():
            self.register(code, message_template)

    def freeze(self) -> None:
        self._frozen = True
        logger.info(
            "api_codes_frozen",
            user_codes=len(self._messages) - len(BASE_MESSAGES),
            max_code=self._max_code,
        )

    def resolve(self, code: int) -> str:
        """Return the message template for ``code``, or raise UnknownCodeError."""
        if not is_api_code(code):
            raise UnknownCodeError(code)
        try:
            return self._messages[code]
        except KeyError:
            raise UnknownCodeError(code) from None

    def __contains__(self, code: object) -> bool:
        return is_api_code(code) and code in self._messages

    def __len__(self) -> int:
        return len(self._messages)
