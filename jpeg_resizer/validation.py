from __future__ import annotations

from typing import Optional

from .errors import Failure, Reason

# Largest width/height a baseline JPEG frame header can carry in practice.
MAX_JPEG_DIMENSION = 65500


def validate_dimensions(width: int, height: int) -> Optional[Failure]:
    """Return a ``Failure`` if either target axis is out of ``[1, 65500]``."""
    if width <= 0 or height <= 0:
        return Failure.invalid(
            Reason.INVALID_DIMENSION,
            "Target dimensions must be positive integers",
        )
    if width > MAX_JPEG_DIMENSION or height > MAX_JPEG_DIMENSION:
        return Failure.invalid(
            Reason.DIMENSION_TOO_LARGE,
            "Target dimensions exceed maximum JPEG size",
        )
    return None
