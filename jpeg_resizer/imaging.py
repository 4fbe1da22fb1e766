"""
Image codec backends.

A codec turns encoded bytes into an in-memory image, resizes that image to an
exact pixel size and encodes it back to JPEG. Two backends are provided:

• ``opencv``  – ``cv2.imdecode`` / ``INTER_AREA`` / ``cv2.imencode``
• ``pillow``  – ``Image.open`` / ``BOX`` (shrink) or ``BICUBIC`` (grow) / ``Image.save``

Backends keep no state between calls, so one instance is shared by all
worker threads.
"""
from __future__ import annotations

import io
from typing import Any, Callable, Dict, Protocol, Tuple

import cv2
import numpy as np
from PIL import Image

from .errors import ImageCodecError

JPEG_QUALITY = 85


class ImageCodec(Protocol):
    name: str

    def decode(self, data: bytes) -> Any: ...

    def resize(self, image: Any, width: int, height: int) -> Any: ...

    def encode(self, image: Any, quality: int = JPEG_QUALITY) -> bytes: ...

    def size(self, image: Any) -> Tuple[int, int]: ...

    def release(self, image: Any) -> None: ...


class OpenCVCodec:
    name = "opencv"

    def decode(self, data: bytes) -> np.ndarray:
        buf = np.frombuffer(data, dtype=np.uint8)
        image = cv2.imdecode(buf, cv2.IMREAD_COLOR)
        if image is None or image.size == 0:
            raise ImageCodecError("cv2.imdecode returned no image")
        return image

    def resize(self, image: np.ndarray, width: int, height: int) -> np.ndarray:
        return cv2.resize(image, (width, height), interpolation=cv2.INTER_AREA)

    def encode(self, image: np.ndarray, quality: int = JPEG_QUALITY) -> bytes:
        params = [
            cv2.IMWRITE_JPEG_QUALITY, quality,
            cv2.IMWRITE_JPEG_OPTIMIZE, 1,
        ]
        ok, buf = cv2.imencode(".jpg", image, params)
        if not ok:
            raise ImageCodecError("cv2.imencode failed")
        return buf.tobytes()

    def size(self, image: np.ndarray) -> Tuple[int, int]:
        h, w = image.shape[:2]
        return w, h

    def release(self, image: np.ndarray) -> None:
        # numpy buffers are freed with their last reference
        return None


class PillowCodec:
    name = "pillow"

    def decode(self, data: bytes) -> Image.Image:
        src = Image.open(io.BytesIO(data))
        try:
            src.load()
            return src.convert("RGB")
        finally:
            src.close()

    def resize(self, image: Image.Image, width: int, height: int) -> Image.Image:
        cur_w, cur_h = image.size
        # area-weighted when shrinking, bicubic when growing
        if width <= cur_w and height <= cur_h:
            resample = Image.Resampling.BOX
        else:
            resample = Image.Resampling.BICUBIC
        return image.resize((width, height), resample)

    def encode(self, image: Image.Image, quality: int = JPEG_QUALITY) -> bytes:
        buf = io.BytesIO()
        image.save(buf, format="JPEG", quality=quality, optimize=True)
        return buf.getvalue()

    def size(self, image: Image.Image) -> Tuple[int, int]:
        return image.size

    def release(self, image: Image.Image) -> None:
        image.close()


_BACKENDS: Dict[str, Callable[[], ImageCodec]] = {
    OpenCVCodec.name: OpenCVCodec,
    PillowCodec.name: PillowCodec,
}


def available_codecs() -> Tuple[str, ...]:
    return tuple(sorted(_BACKENDS))


def get_codec(name: str) -> ImageCodec:
    """Instantiate the codec backend registered under *name*."""
    try:
        factory = _BACKENDS[name.lower()]
    except KeyError:
        raise ValueError(
            f"unknown codec {name!r}; expected one of {', '.join(available_codecs())}"
        ) from None
    return factory()
