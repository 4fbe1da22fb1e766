"""
Resize pipeline: VALIDATING → DECODING → RESIZING → ENCODING → DONE.

Any stage may end the run with a ``Failure``; stages hand back values rather
than raising, so the caller only ever sees ``Done`` or ``Failure``. Image
handles produced by the codec are released when the stage that owns them is
left, on success and on failure alike.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union

import structlog

from . import b64codec
from .errors import DecodeError, Done, Failure, Reason, TransformResult
from .imaging import JPEG_QUALITY, ImageCodec
from .validation import validate_dimensions

log = structlog.get_logger()

IMAGE_DECODE_FAILED = "Failed to decode JPEG image - invalid format or corrupted data"
IMAGE_ENCODE_FAILED = "Failed to encode resized image to JPEG"
EMPTY_INPUT = "Invalid or empty base64 input"


class Stage(str, Enum):
    VALIDATING = "validating"
    DECODING = "decoding"
    RESIZING = "resizing"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"


class ResizePipeline:
    """Runs one base64 JPEG through decode, resize and encode."""

    def __init__(self, codec: ImageCodec, quality: int = JPEG_QUALITY):
        self.codec = codec
        self.quality = quality

    def run(self,
            input_jpeg: str,
            width: int,
            height: int,
            request_id: Optional[str] = None) -> TransformResult:
        rlog = log.bind(request_id=request_id, width=width, height=height,
                        codec=self.codec.name)

        rlog.debug("stage_entered", stage=Stage.VALIDATING.value)
        failure = validate_dimensions(width, height)
        if failure is not None:
            return self._failed(rlog, Stage.VALIDATING, failure)

        rlog.debug("stage_entered", stage=Stage.DECODING.value)
        decoded = self._decode(input_jpeg)
        if isinstance(decoded, Failure):
            return self._failed(rlog, Stage.DECODING, decoded)
        rlog.debug("image_decoded", size=self.codec.size(decoded))

        rlog.debug("stage_entered", stage=Stage.RESIZING.value)
        resized = self._resize(decoded, width, height)
        # released by the resize stage; drop the last reference here
        del decoded
        if isinstance(resized, Failure):
            return self._failed(rlog, Stage.RESIZING, resized)

        rlog.debug("stage_entered", stage=Stage.ENCODING.value)
        jpeg = self._encode(resized)
        del resized
        if isinstance(jpeg, Failure):
            return self._failed(rlog, Stage.ENCODING, jpeg)

        output = b64codec.encode(jpeg)
        rlog.debug("stage_entered", stage=Stage.DONE.value,
                   output_bytes=len(jpeg))
        return Done(output_jpeg=output)

    # ──────────────────────────────────────────────
    #  Stages
    # ──────────────────────────────────────────────
    def _decode(self, input_jpeg: str) -> Union[Any, Failure]:
        try:
            raw = b64codec.decode(input_jpeg)
        except DecodeError as exc:
            return Failure.invalid(Reason.MALFORMED_BASE64,
                                   f"Malformed base64 input: {exc}")
        if not raw:
            return Failure.invalid(Reason.EMPTY_INPUT, EMPTY_INPUT)

        try:
            return self.codec.decode(raw)
        except Exception as exc:
            log.debug("image_decode_error", err=str(exc), input_bytes=len(raw))
            return Failure.processing(Reason.IMAGE_DECODE, IMAGE_DECODE_FAILED)

    def _resize(self, image: Any, width: int, height: int) -> Union[Any, Failure]:
        resized = None
        try:
            resized = self.codec.resize(image, width, height)
            return resized
        except Exception as exc:
            return Failure.processing(Reason.IMAGE_RESIZE,
                                      f"Failed to resize image: {exc}")
        finally:
            if resized is not image:
                self.codec.release(image)

    def _encode(self, image: Any) -> Union[bytes, Failure]:
        try:
            jpeg = self.codec.encode(image, self.quality)
        except Exception as exc:
            log.debug("image_encode_error", err=str(exc))
            return Failure.processing(Reason.IMAGE_ENCODE, IMAGE_ENCODE_FAILED)
        finally:
            self.codec.release(image)
        if not jpeg:
            return Failure.processing(Reason.IMAGE_ENCODE, IMAGE_ENCODE_FAILED)
        return jpeg

    @staticmethod
    def _failed(rlog, stage: Stage, failure: Failure) -> Failure:
        rlog.debug("stage_entered", stage=Stage.FAILED.value, failed_in=stage.value)
        rlog.warning("resize_failed", stage=stage.value,
                     kind=failure.kind.value, reason=failure.reason.value,
                     detail=failure.detail)
        return failure
