from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from response_builder.api_codes import DEFAULT_MAX_CODE, RESERVED_MAX_CODE
from response_builder.encoding import CONF_KEY_ENCODING_OPTIONS
from response_builder.exceptions import InvalidConfigurationTypeError

_NOT_A_BITMASK = "must be a non-negative integer bitmask"


class ResponseBuilderSettings(BaseSettings):
    """Response builder options loaded from environment variables.

    Every variable is prefixed with RESPONSE_BUILDER_ (e.g.
    RESPONSE_BUILDER_DATA_ALWAYS_OBJECT=true). The model is frozen: one
    instance is the configuration snapshot the builder sees for its lifetime.
    """

    # JSON encoding bitmask (see encoding.JsonEncoding); None = built-in default
    encoding_options: int | None = None

    # Serialize a None payload as {} instead of null
    data_always_object: bool = False

    # Upper bound of the user API code range (RESERVED_MAX_CODE, max_code]
    max_code: int = Field(default=DEFAULT_MAX_CODE, gt=RESERVED_MAX_CODE)

    model_config = SettingsConfigDict(
        env_prefix="RESPONSE_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("encoding_options", mode="before")
    @classmethod
    def _check_bitmask(cls, value: Any) -> Any:
        # Env vars arrive as strings; everything else must already be an int
        if value is None:
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(_NOT_A_BITMASK)
        return value


def load_settings(**overrides: Any) -> ResponseBuilderSettings:
    """Build the settings snapshot.

    A bad ``encoding_options`` value surfaces as InvalidConfigurationTypeError;
    other validation failures propagate as pydantic's ValidationError.
    """
    try:
        return ResponseBuilderSettings(**overrides)
    except ValidationError as exc:
        for error in exc.errors():
            if error["loc"] and error["loc"][0] == CONF_KEY_ENCODING_OPTIONS:
                raise InvalidConfigurationTypeError(
                    CONF_KEY_ENCODING_OPTIONS, error.get("input")
                ) from exc
        raise


settings = load_settings()
