from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import structlog
from pydantic import ValidationError

from .errors import Done, Failure, Reason
from .resizer import ResizePipeline
from .schemas import ResizeRequest, ResizeResponse

log = structlog.get_logger()


@dataclass(frozen=True)
class HandlerResult:
    status: int
    body: Dict[str, Any]


def _describe_validation_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    kind = err["type"]
    field = ".".join(str(p) for p in err.get("loc", ()))
    if kind == "json_invalid":
        return "request body is not valid JSON"
    if kind in ("model_type", "model_attributes_type", "dict_type"):
        return "request body must be a JSON object"
    if kind == "missing":
        return f"missing required field '{field}'"
    return f"field '{field}': {err['msg']}"


def parse_request(body: Union[bytes, str]) -> Union[ResizeRequest, Failure]:
    """Parse the JSON envelope; a malformed one is an invalid-input failure."""
    try:
        return ResizeRequest.model_validate_json(body)
    except ValidationError as exc:
        return Failure.invalid(Reason.MALFORMED_ENVELOPE,
                               _describe_validation_error(exc))


def to_response(result: Union[Done, Failure]) -> HandlerResult:
    if isinstance(result, Done):
        resp = ResizeResponse(code="200", message="success",
                              output_jpeg=result.output_jpeg)
        return HandlerResult(200, resp.to_wire())
    resp = ResizeResponse(code=result.http_status, message=result.message)
    return HandlerResult(result.http_status, resp.to_wire())


def handle_resize(body: Union[bytes, str],
                  pipeline: ResizePipeline,
                  request_id: Optional[str] = None) -> HandlerResult:
    """
    Full request → response mapping for ``POST /resize_image``.

    Never raises: unexpected faults inside the pipeline become a 500 envelope
    so the server keeps serving later requests.
    """
    req = parse_request(body)
    if isinstance(req, Failure):
        log.warning("request_rejected", request_id=request_id,
                    reason=req.reason.value, detail=req.detail)
        return to_response(req)

    try:
        result = pipeline.run(req.input_jpeg, req.desired_width,
                              req.desired_height, request_id=request_id)
    except Exception as exc:
        log.exception("resize_crashed", request_id=request_id, err=str(exc))
        result = Failure.processing(Reason.UNEXPECTED, str(exc) or type(exc).__name__)

    if isinstance(result, Done):
        log.info("resize_complete", request_id=request_id,
                 width=req.desired_width, height=req.desired_height,
                 output_size=len(result.output_jpeg))
    return to_response(result)
