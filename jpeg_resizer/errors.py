from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class FailureKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    PROCESSING_ERROR = "processing_error"


class Reason(str, Enum):
    """Which check or stage produced a failure."""

    MALFORMED_ENVELOPE = "malformed_envelope"
    INVALID_DIMENSION = "invalid_dimension"
    DIMENSION_TOO_LARGE = "dimension_too_large"
    MALFORMED_BASE64 = "malformed_base64"
    EMPTY_INPUT = "empty_input"
    IMAGE_DECODE = "image_decode"
    IMAGE_RESIZE = "image_resize"
    IMAGE_ENCODE = "image_encode"
    UNEXPECTED = "unexpected"


_HTTP_STATUS = {
    FailureKind.INVALID_INPUT: 400,
    FailureKind.PROCESSING_ERROR: 500,
}

_MESSAGE_PREFIX = {
    FailureKind.INVALID_INPUT: "Invalid input",
    FailureKind.PROCESSING_ERROR: "Internal server error",
}


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    reason: Reason
    detail: str

    @classmethod
    def invalid(cls, reason: Reason, detail: str) -> "Failure":
        return cls(FailureKind.INVALID_INPUT, reason, detail)

    @classmethod
    def processing(cls, reason: Reason, detail: str) -> "Failure":
        return cls(FailureKind.PROCESSING_ERROR, reason, detail)

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self.kind]

    @property
    def message(self) -> str:
        """Caller-facing text, e.g. ``Invalid input: <detail>``."""
        return f"{_MESSAGE_PREFIX[self.kind]}: {self.detail}"


@dataclass(frozen=True)
class Done:
    output_jpeg: str


TransformResult = Union[Done, Failure]


class DecodeError(ValueError):
    """Raised by the base64 codec on text that is not valid base64."""


class ImageCodecError(RuntimeError):
    """Raised by an image codec backend when it cannot decode, resize or encode."""
