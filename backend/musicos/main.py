import logging
import os
from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from musicos.api.health import router as health_router
from musicos.api.routes_accounts import router as accounts_router
from musicos.api.routes_admin import router as admin_router
from musicos.api.routes_cart import router as cart_router
from musicos.api.routes_offers import router as offers_router
from musicos.api.routes_order import router as order_router
from musicos.api.routes_quotes import router as quotes_router
from musicos.config import settings
from musicos.db import SessionLocal, init_db
from musicos.errors import DomainError
from musicos.services.checkout_service import CheckoutService
from musicos.services.security import CsrfTokenStore, RateLimiter, SqlRateLimitStorage

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
log = logging.getLogger("musicos")


def run_maintenance(app: FastAPI):
    """Purge stale security state and, when enabled, expire overdue orders."""
    app.state.csrf_store.purge_expired()
    app.state.rate_limiter.purge_expired()
    db = SessionLocal()
    try:
        CheckoutService(db).expire_overdue()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    init_db()
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_maintenance,
        "interval",
        args=[app],
        seconds=settings.MAINTENANCE_INTERVAL_SECONDS,
        id="maintenance",
    )
    scheduler.start()
    log.info("maintenance job every %ss (order expiry enforced: %s)",
             settings.MAINTENANCE_INTERVAL_SECONDS, settings.ORDER_EXPIRY_ENFORCED)

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)


app = FastAPI(title="MúsicosBooking - Backend", version="0.1.0", lifespan=lifespan)

app.state.rate_limiter = RateLimiter(
    SqlRateLimitStorage(SessionLocal),
    max_attempts=settings.RATE_LIMIT_MAX_ATTEMPTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
)
app.state.csrf_store = CsrfTokenStore(ttl_seconds=settings.CSRF_TTL_SECONDS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Campo inválido: {field}" if field else "Pedido inválido"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(offers_router, prefix="/api/offers", tags=["offers"])

app.include_router(cart_router, tags=["cart"])

app.include_router(order_router, prefix="/api/orders", tags=["orders"])

app.include_router(admin_router, tags=["admin"])

app.include_router(accounts_router, tags=["auth"])

app.include_router(quotes_router, tags=["quotes"])

app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")
