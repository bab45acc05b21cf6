"""
VOS - Vehicle Offer Service case workflow
FastAPI application entry point
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from vos.core.config import settings
from vos.core.database import engine, Base
from vos.core.errors import WorkflowError
from vos.core.logging_config import configure_logging
from vos.api import cases, inspections, quotes, signing, time_tracking, users
# Import models to ensure they're registered with Base.metadata
from vos.models import Case, Customer, Vehicle, Inspection, Quote, Transaction, TimeTracking, User, SigningSession

configure_logging()
logger = logging.getLogger(__name__)


# Create database tables
async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Seven-stage workflow for used-vehicle purchase cases",
    version=settings.VERSION,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    return _error(422, errors or "Invalid request")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


# Include routers
app.include_router(cases.intake_router, tags=["intake"])
app.include_router(cases.router, prefix="/cases", tags=["cases"])
app.include_router(inspections.router, prefix="/inspections", tags=["inspections"])
app.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
app.include_router(time_tracking.router, tags=["time-tracking"])
app.include_router(signing.router, prefix="/signing", tags=["signing"])
app.include_router(users.router, prefix="/users", tags=["users"])

# Generated PDFs
app.mount("/uploads/pdfs", StaticFiles(directory=str(settings.PDF_DIR), check_dir=False), name="pdfs")


@app.on_event("startup")
async def startup_event():
    """Initialize database and PDF directory on startup"""
    settings.PDF_DIR.mkdir(parents=True, exist_ok=True)
    await init_db()
    logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
    }


@app.get("/health")
async def health():
    """Detailed health check"""
    return {
        "status": "healthy",
        "database": "connected",
        "mail": "smtp" if settings.SMTP_HOST else "log-only",
    }
