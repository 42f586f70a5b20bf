"""Starlette response that serializes envelopes with the resolved encoding."""

from collections.abc import Mapping
from typing import Any

from fastapi.responses import JSONResponse
from starlette.background import BackgroundTask

from response_builder.builder import BuiltResponse
from response_builder.encoding import DEFAULT_ENCODING_OPTIONS, encode_json


class EnvelopeJSONResponse(JSONResponse):
    """JSONResponse whose render() honors a JsonEncoding bitmask."""

    def __init__(
        self,
        content: Any,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        media_type: str | None = None,
        background: BackgroundTask | None = None,
        encoding_options: int = DEFAULT_ENCODING_OPTIONS,
    ) -> None:
        # render() runs inside JSONResponse.__init__, so this must be set first
        self.encoding_options = encoding_options
        super().__init__(content, status_code, headers, media_type, background)

    def render(self, content: Any) -> bytes:
        return encode_json(content, self.encoding_options).encode("utf-8")


def as_json_response(
    built: BuiltResponse, headers: Mapping[str, str] | None = None
) -> EnvelopeJSONResponse:
    """Hand a built envelope to the transport."""
    return EnvelopeJSONResponse(
        content=built.body(),
        status_code=built.http_status,
        headers=headers,
        encoding_options=built.encoding_options,
    )
