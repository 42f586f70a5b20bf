"""Response envelope schema.

Every response body has the same shape:
{"success": ..., "code": ..., "message": "...", "data": ...}.
The HTTP status travels next to the body, not inside it.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResponseEnvelope(BaseModel):
    """Immutable envelope assembled once per response."""

    model_config = ConfigDict(frozen=True)

    success: bool
    code: int = Field(ge=0)
    message: str = Field(min_length=1)
    data: Any = None
    http_status: int = Field(exclude=True)

    def body(self) -> dict[str, Any]:
        """The JSON object handed to the transport, in canonical key order."""
        return {
            "success": self.success,
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }
