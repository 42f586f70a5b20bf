"""Reusable registry and builder fixtures."""

import pytest

from response_builder.api_codes import ApiCodeRegistry
from response_builder.builder import ResponseBuilder
from tests.factories import make_builder, make_registry


@pytest.fixture
def registry() -> ApiCodeRegistry:
    """Frozen registry seeded with the test user codes (max_code=127)."""
    return make_registry()


@pytest.fixture
def builder() -> ResponseBuilder:
    """Builder with default encoding and data_always_object disabled."""
    return make_builder()
