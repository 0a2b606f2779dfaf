# cloka_events/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from cloka_events.api.v1.api import api_router
from cloka_events.core.config import settings
from cloka_events.core.exceptions import StorageError, WorkflowError
from cloka_events.db.session import Database

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Runs once per process. The Database handle is created here and shared by
# every request; tests may install their own before startup.
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    if getattr(app.state, "database", None) is None:
        app.state.database = Database(settings.DATABASE_URL)
    app.state.database.create_all()
    yield
    logger.info("Application shutting down...")
    app.state.database.dispose()


app = FastAPI(
    title="Cloka Events Service",
    version="1.0.0",
    description="""
        **Cloka Events**

        Event registration, approval and check-in.

        ## Features

        * **Events**: Admins publish events; anyone can browse upcoming ones
        * **Registration**: Users register and wait for admin approval
        * **Check-in**: Approved attendees check in at the venue with a
          short-lived token shown as a QR code

        ## Authentication

        Most endpoints require a JWT via the `Authorization: Bearer <token>` header.
        Routes under `/admin/` additionally require the `isAdmin` claim.
        """,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    if isinstance(exc, StorageError):
        logger.error(f"{request.method} {request.url.path} failed: storage unavailable")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "retryable": exc.retryable},
    )


# Database failures raised outside RegistrationWorkflow
@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"{request.method} {request.url.path} failed: {exc}")
    error = StorageError()
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.message, "code": error.code, "retryable": error.retryable},
    )


app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Cloka Events Service is running"}
