import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

# Import models so they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS
from .database import Base, engine
from .domain.scheduling.router import barbers_router, router as appointments_router
from .domain.scheduling.conflicts import ScheduledAppointment
from .domain.time_blocks.router import router as time_blocks_router
from .shared.exceptions import ConflictError, SchedulingError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Barbershop Booking API", version="1.0.0", lifespan=lifespan)


def _conflict_payload(conflict) -> dict:
    if isinstance(conflict, ScheduledAppointment):
        return {
            "type": "appointment",
            "id": conflict.id,
            "startsAt": conflict.start.isoformat(),
            "endsAt": conflict.end.isoformat(),
            "clientName": conflict.display_name,
            "serviceName": conflict.service_name,
        }
    return {
        "type": "time_block",
        "id": conflict.id,
        "startsAt": conflict.starts_at.isoformat(),
        "endsAt": conflict.ends_at.isoformat(),
        "reason": conflict.reason,
    }


@app.exception_handler(SchedulingError)
async def scheduling_exception_handler(request: Request, exc: SchedulingError):
    """Map domain errors to 400 / 404 / 409"""
    logger.warning(f"⚠️ {request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    content = {"detail": exc.message}
    if isinstance(exc, ConflictError) and exc.conflict is not None:
        content["conflict"] = _conflict_payload(exc.conflict)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """The database rejected a write, e.g. the overlap exclusion constraint"""
    logger.warning(f"⚠️ Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=409,
        content={"detail": "This time slot is not available. It was just booked by someone else."},
    )


def _jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry the raw ValueError raised by a field validator
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": _jsonable_errors(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(appointments_router)
app.include_router(time_blocks_router)
app.include_router(barbers_router)


@app.get("/")
async def root():
    return {"message": "Barbershop Booking API", "docs": "/docs"}


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "barbershop-booking-api"}
