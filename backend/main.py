import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.errors import EggLedgerError
from core.inventory import ensure_inventory
from core.logger import setup_logger
from db.database import async_session_maker, create_db_and_tables
from routers.admin import router as admin_router
from routers.collections import router as collections_router
from routers.inventory import router as inventory_router
from routers.sales import router as sales_router
from routers.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logger()
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET must be set before starting the API")
    await create_db_and_tables()
    async with async_session_maker() as db:
        await ensure_inventory(db)
    logger.info("Egg ledger API ready")
    yield


app = FastAPI(
    title="Egg Ledger API",
    description="API for tracking egg collections, sales and stock",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EggLedgerError)
async def egg_ledger_error_handler(request: Request, exc: EggLedgerError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
    else:
        message = "invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}


# Authentication routes
app.include_router(users_router, prefix="/api", tags=["auth"])

# Ledger routes
app.include_router(collections_router, prefix="/api/collections", tags=["collections"])
app.include_router(sales_router, prefix="/api/sales", tags=["sales"])
app.include_router(inventory_router, prefix="/api/inventory", tags=["inventory"])

# Admin routes
app.include_router(admin_router, prefix="/api/admin", tags=["admin"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=True)
