"""JSON encoding policy.

The encoding options are an int bitmask of ``JsonEncoding`` flags. Flag
values match the widely used JSON encoder constants so numbers already sitting
in configuration keep their meaning. ``encode_json`` renders a payload with
``json.dumps`` and then rewrites every string token according to the flags.
"""

import json
import re
from dataclasses import dataclass
from enum import IntFlag
from typing import Any

from fastapi.encoders import jsonable_encoder

from response_builder.exceptions import InvalidArgumentTypeError, InvalidConfigurationTypeError

CONF_KEY_ENCODING_OPTIONS = "encoding_options"


class JsonEncoding(IntFlag):
    HEX_TAG = 1
    HEX_AMP = 2
    HEX_APOS = 4
    HEX_QUOT = 8
    UNESCAPED_SLASHES = 64
    PRETTY_PRINT = 128
    UNESCAPED_UNICODE = 256


# Escape HTML-sensitive characters; non-ASCII is escaped too (UNESCAPED_UNICODE unset)
DEFAULT_ENCODING_OPTIONS = (
    JsonEncoding.HEX_TAG | JsonEncoding.HEX_APOS | JsonEncoding.HEX_AMP | JsonEncoding.HEX_QUOT
)

_KNOWN_FLAGS = sum(flag.value for flag in JsonEncoding)

_HEX_ESCAPES: dict[str, tuple[JsonEncoding, str]] = {
    "<": (JsonEncoding.HEX_TAG, "\\u003C"),
    ">": (JsonEncoding.HEX_TAG, "\\u003E"),
    "&": (JsonEncoding.HEX_AMP, "\\u0026"),
    "'": (JsonEncoding.HEX_APOS, "\\u0027"),
}

# A JSON string token; quotes never appear outside strings in json.dumps output
_STRING_TOKEN = re.compile(r'"((?:[^"\\]|\\.)*)"')
# Inside a token: an escape pair (matched whole so \\" is never split) or a char to rewrite
_BODY_TOKEN = re.compile(r"\\.|[<>&'/]")


def is_bitmask(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _rewrite_body(body: str, flags: JsonEncoding) -> str:
    def replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == '\\"':
            return "\\u0022" if JsonEncoding.HEX_QUOT in flags else token
        if token.startswith("\\"):
            return token
        if token == "/":
            return token if JsonEncoding.UNESCAPED_SLASHES in flags else "\\/"
        flag, escaped = _HEX_ESCAPES[token]
        return escaped if flag in flags else token

    return _BODY_TOKEN.sub(replace, body)


def encode_json(payload: Any, options: int = DEFAULT_ENCODING_OPTIONS) -> str:
    """Serialize ``payload`` honoring the encoding bitmask.

    Rich types (pydantic models, datetimes, decimals) are converted with
    FastAPI's ``jsonable_encoder`` first. Unknown bits are ignored.
    """
    flags = JsonEncoding(options & _KNOWN_FLAGS)
    pretty = JsonEncoding.PRETTY_PRINT in flags
    text = json.dumps(
        jsonable_encoder(payload),
        ensure_ascii=JsonEncoding.UNESCAPED_UNICODE not in flags,
        allow_nan=False,
        indent=4 if pretty else None,
        separators=(",", ": ") if pretty else (",", ":"),
    )
    return _STRING_TOKEN.sub(lambda m: '"' + _rewrite_body(m.group(1), flags) + '"', text)


@dataclass(frozen=True)
class EncodingPolicy:
    """Resolves the effective bitmask: per-call override > configuration > default."""

    configured: int | None = None

    def __post_init__(self) -> None:
        if self.configured is not None and not is_bitmask(self.configured):
            raise InvalidConfigurationTypeError(CONF_KEY_ENCODING_OPTIONS, self.configured)

    def resolve(self, override: int | None = None) -> int:
        if override is not None:
            if not is_bitmask(override):
                raise InvalidArgumentTypeError(
                    "encoding_options", override, "a non-negative int bitmask"
                )
            return int(override)
        if self.configured is not None:
            return int(self.configured)
        return int(DEFAULT_ENCODING_OPTIONS)
