"""Public entrypoint for creating gateway checkout orders.

Validates the order request, throttles per client, optionally replays a cached
response for a repeated idempotency key, and forwards everything else to the
payment gateway through `PaymentOrderService`.
"""

from time import perf_counter
from uuid import uuid4

import redis.asyncio as aioredis
import uvicorn
from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from innovatex.common.config import settings
from innovatex.common.idempotency import IdempotencyCache, idempotency_cache_key
from innovatex.common.logging import configure_logging, logger, trace_id_ctx
from innovatex.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    idempotent_replays_total,
    metrics_response,
    rate_limited_total,
)
from innovatex.common.rate_limit import FixedWindowLimiter
from innovatex.common.startup import log_startup_config
from innovatex.common.tracing import instrument_app, setup_tracing
from innovatex.services.payment_proxy.errors import (
    INTERNAL_ERROR_MESSAGE,
    MISSING_ORDER_DETAILS,
    PaymentProxyError,
    RateLimitExceededError,
)
from innovatex.services.payment_proxy.schemas import CreatePaymentOrderRequest, HealthResponse
from innovatex.services.payment_proxy.service import PaymentOrderService

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "CASHFREE_APP_ID",
        "CASHFREE_SECRET_KEY",
        "CASHFREE_API_ENV",
        "FRONTEND_URL",
        "RETURN_URL",
        "REDIS_URL",
        "PORT",
    ],
)
app = FastAPI(title="InnovateX Payment Proxy")
instrument_app(app)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["x-correlation-id"],
)
rdb = aioredis.Redis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_connect_timeout=settings.redis_timeout_seconds,
    socket_timeout=settings.redis_timeout_seconds,
)
service = PaymentOrderService(settings)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency, and stamp correlation/security headers."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    trace_id = request.headers.get("x-correlation-id") or str(uuid4())
    trace_id_ctx.set(trace_id)
    try:
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("unhandled error path=%s", request.url.path)
            response = JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        response.headers["x-correlation-id"] = trace_id
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


@app.exception_handler(PaymentProxyError)
async def payment_proxy_error_handler(_: Request, exc: PaymentProxyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Any malformed create-order body is a 400 with the fixed message."""

    logger.info("order request rejected path=%s errors=%s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"message": MISSING_ORDER_DETAILS})


def get_payment_service() -> PaymentOrderService:
    return service


def get_rate_limiter() -> FixedWindowLimiter:
    return FixedWindowLimiter(rdb, settings.rate_limit_max_requests, settings.rate_limit_window_seconds)


def get_idempotency_cache() -> IdempotencyCache:
    return IdempotencyCache(rdb, settings.idempotency_ttl_seconds)


def client_key(request: Request) -> str:
    """Socket peer, or the hop appended by the outermost trusted proxy.

    With `TRUSTED_PROXY_COUNT=n` the n-th `x-forwarded-for` entry from the
    right is used; entries further left are client-controlled.
    """

    hops = settings.trusted_proxy_count
    forwarded = request.headers.get("x-forwarded-for")
    if hops > 0 and forwarded:
        chain = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        if len(chain) >= hops:
            return chain[-hops]
    if request.client is not None:
        return request.client.host
    return "unknown"


async def enforce_rate_limit(request: Request, limiter: FixedWindowLimiter = Depends(get_rate_limiter)) -> None:
    if not await limiter.allow(client_key(request)):
        rate_limited_total.labels(service=settings.service_name).inc()
        logger.warning("rate limit exceeded client=%s", client_key(request))
        raise RateLimitExceededError()


@app.post("/api/create-payment-order", dependencies=[Depends(enforce_rate_limit)])
@app.post("/api/create-payment-session", dependencies=[Depends(enforce_rate_limit)])
@app.post("/api/create-cashfree-order", dependencies=[Depends(enforce_rate_limit)])
async def create_payment_order(
    req: CreatePaymentOrderRequest,
    x_idempotency_key: str | None = Header(default=None),
    payments: PaymentOrderService = Depends(get_payment_service),
    cache: IdempotencyCache = Depends(get_idempotency_cache),
):
    """Create a gateway order and relay the gateway body.

    With `x-idempotency-key`, a prior successful body for the same customer
    and key is returned without calling the gateway.
    """

    cache_key = None
    if x_idempotency_key:
        cache_key = idempotency_cache_key(req.customer_details.customer_id or "anonymous", x_idempotency_key)
        cached = await cache.get(cache_key)
        if cached is not None:
            idempotent_replays_total.labels(service=settings.service_name).inc()
            logger.info("idempotent replay key=%s", x_idempotency_key)
            return JSONResponse(status_code=200, content=cached)

    data = await payments.create_order(req, trace_id_ctx.get() or str(uuid4()))
    if cache_key is not None:
        await cache.put(cache_key, data)
    return JSONResponse(status_code=200, content=data)


@app.get("/api/health", response_model=HealthResponse)
@app.get("/health", response_model=HealthResponse)
def health():
    """Liveness probe; independent of the gateway and Redis."""

    return HealthResponse()


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


def serve() -> None:
    """Console entrypoint: run the app under uvicorn."""

    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    serve()
