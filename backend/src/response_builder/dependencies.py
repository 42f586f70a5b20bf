"""Shared FastAPI dependencies.

The builder lives on ``app.state`` (set by create_app), so routes get it by
dependency instead of importing a module-level global.
"""

from typing import Annotated

from fastapi import Depends, Request

from response_builder.builder import ResponseBuilder


def get_response_builder(request: Request) -> ResponseBuilder:
    return request.app.state.response_builder  # type: ignore[no-any-return]


Builder = Annotated[ResponseBuilder, Depends(get_response_builder)]
