# Main application file



import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shopledger.database import engine, Base, SessionLocal
from shopledger.core.rate_limiter import limiter
from shopledger.core.config import settings
from shopledger.core.errors import LedgerError, ledger_error_handler
import shopledger.models.users  # noqa: F401
import shopledger.models.products  # noqa: F401
import shopledger.models.ledger  # noqa: F401
import shopledger.models.partners  # noqa: F401
from shopledger.routers import (
    auth,
    products,
    expenses,
    finance,
    partners,
    health,
)
from shopledger.services.users import seed_defaults


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("app")


# STARTUP

@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    if settings.SEED_DEFAULT_DATA:
        db = SessionLocal()
        try:
            seed_defaults(db)
        finally:
            db.close()

    logger.info(f"Shop Ledger API started ({settings.ENV})")
    yield


# APP INIT

app = FastAPI(
    title="Shop Ledger API",
    description="Inventory, expense/income ledger and partner profit sharing for a small shop",
    version="1.0.0",
    lifespan=lifespan,
)



# CORS (Token-based auth)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler
)


# SERVICE ERRORS

app.add_exception_handler(LedgerError, ledger_error_handler)


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} "
        f"Status: {response.status_code} "
        f"Time: {duration}ms"
    )

    return response


# ROUTERS

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(products.router)
app.include_router(expenses.router)
app.include_router(finance.router)
app.include_router(partners.router)


def run():
    uvicorn.run(
        "shopledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
