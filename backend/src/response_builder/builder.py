"""Response envelope assembly.

``ResponseBuilder.make`` is the single path every response takes: it
validates the API code against the registry, resolves the message, shapes the
payload and resolves the encoding bitmask. The result is a ``BuiltResponse``
that the HTTP layer serializes (see responses.py).

The caller picks the code or the message up front with ``ByCode`` /
``ByMessage``; plain ints and strs are accepted and converted at the boundary.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Self, TypeAlias

from response_builder.api_codes import ApiCodeRegistry, BaseApiCode, is_api_code
from response_builder.config import ResponseBuilderSettings
from response_builder.encoding import EncodingPolicy, encode_json
from response_builder.exceptions import (
    CodeOutOfBoundsError,
    InvalidArgumentTypeError,
    InvalidHttpStatusError,
)
from response_builder.logging import get_logger
from response_builder.normalizer import normalize_data
from response_builder.schemas.envelope import ResponseEnvelope

logger = get_logger(__name__)

DEFAULT_SUCCESS_STATUS = 200
DEFAULT_ERROR_STATUS = 400


@dataclass(frozen=True)
class ByCode:
    """Select the message through the registry template of ``code``."""

    code: int


@dataclass(frozen=True)
class ByMessage:
    """Use ``message`` literally with the generic success/error code."""

    message: str


CodeOrMessage: TypeAlias = ByCode | ByMessage


def as_selector(value: object) -> CodeOrMessage:
    """Convert a raw int/str into a variant; reject every other type."""
    if isinstance(value, ByCode | ByMessage):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return ByCode(value)
    if isinstance(value, str):
        return ByMessage(value)
    raise InvalidArgumentTypeError("code_or_message", value, "int, str, ByCode or ByMessage")


# Only {identifier} tokens are placeholders; any other brace text is literal
_PLACEHOLDER = re.compile(r"\{([A-Za-z_]\w*)\}")


@dataclass(frozen=True)
class BuiltResponse:
    """An envelope plus the encoding bitmask it must be serialized with."""

    envelope: ResponseEnvelope
    encoding_options: int

    @property
    def http_status(self) -> int:
        return self.envelope.http_status

    def body(self) -> dict[str, Any]:
        return self.envelope.body()

    def render(self) -> str:
        return encode_json(self.envelope.body(), self.encoding_options)


class ResponseBuilder:
    """Builds envelopes against one registry and one configuration snapshot.

    Holds no per-call state, so one instance is shared by all requests.
    """

    def __init__(self, registry: ApiCodeRegistry, settings: ResponseBuilderSettings) -> None:
        if settings.max_code != registry.max_code:
            raise ValueError(
                f"settings.max_code ({settings.max_code}) does not match "
                f"registry.max_code ({registry.max_code})"
            )
        self._registry = registry
        self._always_object = settings.data_always_object
        self._encoding = EncodingPolicy(settings.encoding_options)

    @property
    def registry(self) -> ApiCodeRegistry:
        return self._registry

    def make(
        self,
        success: bool,
        code_or_message: CodeOrMessage | int | str,
        message_or_code: str | int | None = None,
        data: Any = None,
        http_status: int | None = None,
        encoding_options: int | None = None,
        placeholders: Mapping[str, Any] | None = None,
    ) -> BuiltResponse:
        """Validate the inputs and assemble the envelope.

        Resolution order:
        1. ``code_or_message`` must be ByCode/ByMessage or a plain int/str.
        2. A code is range-checked. A non-empty literal message always wins
           over the template, but the code is validated regardless. An int
           ``message_or_code`` picks the template of that code instead.
        3. ByMessage uses OK/ERROR implicitly unless ``message_or_code`` is an
           int, in which case that code is used.
        4. ``data`` goes through normalize_data.
        5. ``http_status`` defaults to 200/400 and must agree with ``success``.
        6. ``encoding_options`` overrides the configured bitmask.

        Raises:
            InvalidArgumentTypeError, CodeOutOfBoundsError, UnknownCodeError,
            InvalidHttpStatusError
        """
        selector = as_selector(code_or_message)
        if message_or_code is not None and not (
            isinstance(message_or_code, str) or is_api_code(message_or_code)
        ):
            raise InvalidArgumentTypeError("message_or_code", message_or_code, "int, str or None")

        literal: str | None = None
        template_code: int | None = None
        match selector:
            case ByCode(code=code):
                if isinstance(message_or_code, str):
                    literal = message_or_code
                elif message_or_code is not None:
                    template_code = message_or_code
            case ByMessage(message=text):
                if not isinstance(text, str):
                    raise InvalidArgumentTypeError("ByMessage.message", text, "str")
                if isinstance(message_or_code, int):
                    code, literal = message_or_code, text
                else:
                    code = BaseApiCode.OK if success else BaseApiCode.ERROR
                    literal = message_or_code or text

        code = self._check_code(code)
        if template_code is not None:
            template_code = self._check_code(template_code)

        if literal:
            message = literal
        else:
            message = self._render_template(
                template_code if template_code is not None else code, code, placeholders
            )

        status = self._resolve_http_status(success, http_status)
        resolved_encoding = self._encoding.resolve(encoding_options)

        envelope = ResponseEnvelope(
            success=success,
            code=code,
            message=message,
            data=normalize_data(data, self._always_object),
            http_status=status,
        )
        logger.debug("response_built", success=success, code=code, http_status=status)
        return BuiltResponse(envelope=envelope, encoding_options=resolved_encoding)

    def success(
        self,
        data: Any = None,
        code: int = BaseApiCode.OK,
        placeholders: Mapping[str, Any] | None = None,
        http_status: int | None = None,
        encoding_options: int | None = None,
    ) -> BuiltResponse:
        return self.make(
            True,
            ByCode(code),
            data=data,
            http_status=http_status,
            encoding_options=encoding_options,
            placeholders=placeholders,
        )

    def error(
        self,
        code: int,
        placeholders: Mapping[str, Any] | None = None,
        data: Any = None,
        http_status: int | None = None,
        encoding_options: int | None = None,
    ) -> BuiltResponse:
        return self.make(
            False,
            ByCode(code),
            data=data,
            http_status=http_status,
            encoding_options=encoding_options,
            placeholders=placeholders,
        )

    def as_success(self, code: int = BaseApiCode.OK) -> "EnvelopeDraft":
        return EnvelopeDraft(builder=self, success=True, code=code)

    def as_error(self, code: int) -> "EnvelopeDraft":
        return EnvelopeDraft(builder=self, success=False, code=code)

    def _check_code(self, code: int) -> int:
        if not is_api_code(code):
            raise InvalidArgumentTypeError("code", code, "int")
        if not self._registry.is_in_range(code):
            raise CodeOutOfBoundsError(code, self._registry.max_code)
        return int(code)

    def _render_template(
        self, template_code: int, api_code: int, placeholders: Mapping[str, Any] | None
    ) -> str:
        template = self._registry.resolve(template_code)
        values = {"api_code": api_code, **(placeholders or {})}

        def substitute(match: re.Match[str]) -> str:
            name = match.group(1)
            return str(values[name]) if name in values else match.group(0)

        # Templates are non-empty; an empty substitution keeps the raw template
        return _PLACEHOLDER.sub(substitute, template) or template

    @staticmethod
    def _resolve_http_status(success: bool, http_status: int | None) -> int:
        if http_status is None:
            return DEFAULT_SUCCESS_STATUS if success else DEFAULT_ERROR_STATUS
        if not is_api_code(http_status):
            raise InvalidArgumentTypeError("http_status", http_status, "int")
        if success and not 200 <= http_status <= 299:
            raise InvalidHttpStatusError(http_status, success)
        if not success and http_status < 400:
            raise InvalidHttpStatusError(http_status, success)
        return int(http_status)


@dataclass(frozen=True)
class EnvelopeDraft:
    """Fluent front-end for ``make``; every ``with_*`` returns a new draft.

    Example:
        builder.as_error(ApiCode.NO_STOCK).with_data({"sku": sku}).with_http_status(409).build()
    """

    builder: ResponseBuilder
    success: bool
    code: int
    message: str | None = None
    data: Any = None
    http_status: int | None = None
    encoding_options: int | None = None
    placeholders: Mapping[str, Any] = field(default_factory=dict)

    def with_data(self, data: Any) -> Self:
        return replace(self, data=data)

    def with_message(self, message: str) -> Self:
        return replace(self, message=message)

    def with_http_status(self, http_status: int) -> Self:
        return replace(self, http_status=http_status)

    def with_encoding_options(self, encoding_options: int) -> Self:
        return replace(self, encoding_options=encoding_options)

    def with_placeholders(self, placeholders: Mapping[str, Any]) -> Self:
        return replace(self, placeholders=placeholders)

    def build(self) -> BuiltResponse:
        return self.builder.make(
            self.success,
            ByCode(self.code),
            self.message,
            data=self.data,
            http_status=self.http_status,
            encoding_options=self.encoding_options,
            placeholders=self.placeholders,
        )
