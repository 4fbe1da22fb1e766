"""Request/Response schemas"""
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class ResizeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    input_jpeg: StrictStr = Field(..., description="Source JPEG, base64-encoded")
    desired_width: StrictInt = Field(..., description="Target width in pixels")
    desired_height: StrictInt = Field(..., description="Target height in pixels")


class ResizeResponse(BaseModel):
    # "200" on success (string, as existing clients expect); 400/500 otherwise
    code: Union[str, int]
    message: str
    output_jpeg: Optional[str] = Field(
        default=None,
        description="Resized JPEG, base64-encoded; present only on success",
    )

    def to_wire(self) -> dict:
        return self.model_dump(exclude_none=True)


class HealthResponse(BaseModel):
    ok: bool
    codec: str
    workers: int
