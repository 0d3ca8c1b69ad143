import time

from dotenv import load_dotenv

# Load .env before any module reads Settings.
load_dotenv()

from fastapi import FastAPI, Request, Response, HTTPException  # noqa: E402
from fastapi.responses import PlainTextResponse, JSONResponse  # noqa: E402
from prometheus_client import (  # noqa: E402
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)

from pghuman.prom import REGISTRY  # noqa: E402
from app.routers import query  # noqa: E402
from app.settings import get_settings  # noqa: E402
from app.exception_handlers import register_exception_handlers  # noqa: E402

settings = get_settings()

# ----------------------------------------------------------------------------
#  App definition
# ----------------------------------------------------------------------------
application = FastAPI(
    title="pg-human",
    version=settings.app_version,
    description="Ask your PostgreSQL schema a question, get SQL (and its result) back",
)
register_exception_handlers(application)

# Register only versioned API
application.include_router(query.router, prefix="/api/v1")


@application.exception_handler(HTTPException)
async def http_exception_to_error_contract(request: Request, exc: HTTPException):
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content=exc.detail)

    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# ----------------------------------------------------------------------------
#  Prometheus Metrics Middleware
# ----------------------------------------------------------------------------
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["path", "method", "status_code"],
    registry=REGISTRY,
)
REQUEST_LATENCY = Histogram(
    "http_request_latency_seconds",
    "Request latency (seconds)",
    ["path", "method"],
    registry=REGISTRY,
)


@application.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.perf_counter()
    response: Response = await call_next(request)
    elapsed = time.perf_counter() - start
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    name = getattr(route, "name", None) or path

    REQUEST_COUNT.labels(
        path=name,
        method=request.method,
        status_code=str(getattr(response, "status_code", 500)),
    ).inc()
    REQUEST_LATENCY.labels(path=name, method=request.method).observe(elapsed)
    return response


# ----------------------------------------------------------------------------
#  System Endpoints
# ----------------------------------------------------------------------------
@application.get("/healthz", response_class=PlainTextResponse, tags=["system"])
def healthz() -> str:
    return "ok"


@application.get("/readyz", response_class=PlainTextResponse, tags=["system"])
def readyz() -> str:
    """Lightweight readiness probe: ping PostgreSQL using the configured DSN."""
    from adapters.db.postgres_adapter import PostgresAdapter

    dsn = (settings.postgres_dsn or "").strip()
    if not dsn:
        raise HTTPException(status_code=503, detail="not ready")
    try:
        with PostgresAdapter(dsn) as pg:
            pg.ping()
    except Exception:
        raise HTTPException(status_code=503, detail="not ready")
    return "ready"


@application.get("/")
def root():
    return {"status": "ok", "message": "pg-human API is running"}


@application.get("/metrics", tags=["system"])
def metrics():
    data = generate_latest(REGISTRY)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


app = application
