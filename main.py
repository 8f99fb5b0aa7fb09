import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config
from database import engine, Base
from errors import AppError, NotFoundError, StoreError, ValidationError

# --- IMPORT ROUTERS (APIs) ---
from routers import dashboard, students, attendance, fees, performance

# --- IMPORT MODELS (registers the tables on Base) ---
import models  # noqa: F401

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("main")

# --- CREATE DATABASE TABLES ---
Base.metadata.create_all(bind=engine)

app = FastAPI(title=Config.APP_TITLE)

# ==========================================
# ✅ CORS MIDDLEWARE (Admin panel allowed)
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==========================================
# ✅ ERROR HANDLING
# ==========================================
def _error_response(exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    # User input problem, not a system fault
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(exc)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.info("Not found on %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(exc)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(exc)


# --- REGISTER ROUTERS ---
app.include_router(dashboard.router)
app.include_router(students.router)
app.include_router(attendance.router)
app.include_router(fees.router)
app.include_router(performance.router)


@app.get("/health")
def health():
    return {"status": "ok"}
