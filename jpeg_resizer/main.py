from __future__ import annotations

import asyncio
import uuid
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .handler import handle_resize
from .imaging import get_codec
from .logs import configure_logging
from .resizer import ResizePipeline
from .schemas import HealthResponse

log = structlog.get_logger()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build a service instance owning its codec, pipeline and thread pool."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    pipeline = ResizePipeline(get_codec(settings.codec))
    # Thread pool for CPU-bound work
    pool = ThreadPoolExecutor(max_workers=settings.max_workers,
                              thread_name_prefix="resize")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("service_starting", host=settings.host, port=settings.port,
                 codec=pipeline.codec.name, workers=settings.max_workers)
        yield
        pool.shutdown(wait=True)
        log.info("service_stopped")

    app = FastAPI(
        title="jpeg-resizer",
        description="Resizes base64-encoded JPEG images to exact pixel dimensions",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.pipeline = pipeline
    app.state.pool = pool

    @app.post("/resize_image")
    async def resize_image(raw: Request) -> JSONResponse:
        """
        Inputs:
          { "input_jpeg": <base64>, "desired_width": <int>, "desired_height": <int> }
        Returns:
          { "code": "200", "message": "success", "output_jpeg": <base64> }
          or { "code": 400|500, "message": <reason> }
        """
        request_id = raw.headers.get("X-Request-ID", str(uuid.uuid4()))
        body = await raw.body()
        log.info("request_received", request_id=request_id, body_bytes=len(body))

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            pool, handle_resize, body, pipeline, request_id
        )
        return JSONResponse(result.body, status_code=result.status)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Readiness probe."""
        return HealthResponse(ok=True, codec=pipeline.codec.name,
                              workers=settings.max_workers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        log.error("unhandled_error", path=request.url.path, err=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "code": 500,
                "message": f"Internal server error: {type(exc).__name__}",
            },
        )

    return app


def run() -> None:
    """Serve via the app factory: ``uvicorn --factory jpeg_resizer.main:create_app``."""
    settings = get_settings()
    import uvicorn
    uvicorn.run(
        "jpeg_resizer.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
