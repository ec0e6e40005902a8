from collections import defaultdict, deque
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import time

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from driverlens.api.routes import api_router
from driverlens.core.config import get_settings
from driverlens.core.errors import ConfigurationError, InputShapeError
from driverlens.models.criteria import SelectionCriteria


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

settings = get_settings()
logger = logging.getLogger("driverlens.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── startup ──
    criteria = SelectionCriteria.preset(settings.selection_profile)
    logger.info(
        "DriverLens API ready (profile=%s, min_score=%.3f, min_materiality=%.3f).",
        settings.selection_profile,
        criteria.minimum_score,
        criteria.minimum_materiality,
    )
    yield
    # ── shutdown ──
    logger.info("DriverLens API shutdown complete.")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_request_buckets: dict[str, deque[float]] = defaultdict(deque)


def _evict_stale_buckets(now: float, window_seconds: float) -> None:
    for key in list(_request_buckets):
        bucket = _request_buckets[key]
        while bucket and now - bucket[0] > window_seconds:
            bucket.popleft()
        if not bucket:
            del _request_buckets[key]


def allow_request(key: str, now: float, *, limit: int, window_seconds: float) -> bool:
    _evict_stale_buckets(now, window_seconds)
    bucket = _request_buckets[key]
    if len(bucket) >= limit:
        return False
    bucket.append(now)
    return True


@app.exception_handler(InputShapeError)
async def input_shape_error_handler(request: Request, exc: InputShapeError) -> JSONResponse:
    logger.warning("Rejected input for %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.warning("Rejected configuration for %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.middleware("http")
async def request_log_and_rate_limit(request: Request, call_next):
    started = time.monotonic()
    key = f"{request.client.host if request.client else 'unknown'}:{request.url.path}"
    if not allow_request(
        key,
        time.time(),
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    ):
        return JSONResponse(
            status_code=429,
            content={"detail": "Rate limit exceeded. Please retry later."},
        )

    try:
        response = await call_next(request)
    except Exception as exc:  # pragma: no cover
        logger.exception("Unhandled error for %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    elapsed_ms = (time.monotonic() - started) * 1000
    logger.info(
        "%s %s -> %s %.2fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


@app.get("/healthz")
def healthz() -> dict:
    return {"ok": True, "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/", include_in_schema=False)
def root() -> dict[str, str]:
    return {
        "service": settings.app_name,
        "status": "ok",
        "health": "/healthz",
        "api_root": f"{settings.api_prefix}/health",
        "docs": "/docs",
    }


@app.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return Response(status_code=204)


app.include_router(api_router, prefix=settings.api_prefix)
