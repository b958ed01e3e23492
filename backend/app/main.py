"""FastAPI application entry point."""
import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.database import Base, engine
from app.errors import ServiceError

# Import routers
from app.routers import users, events, responses, search

# Import all models so Base.metadata knows about them
from app.models.user import User                              # noqa: F401
from app.models.event import Event, EventParticipant          # noqa: F401
from app.models.response import AttendanceResponse            # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Event Scheduler",
    description="Events, invitations and attendance responses",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"kind": exc.kind, "detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Field shape failures become ``invalid_input`` with one message per field."""
    errors = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"] if part != "body") or "body"
        errors[field] = err["msg"]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"kind": "invalid_input", "detail": "Validation failed", "errors": errors},
    )


# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(responses.router, prefix="/api/events", tags=["Responses"])
app.include_router(search.router, prefix="/api/search", tags=["Search"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
        logger.info("SQLite schema ensured at %s", settings.DATABASE_URL)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
