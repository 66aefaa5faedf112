"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from fastbreak.auth.guard import GuardRedirect
from fastbreak.config import settings
from fastbreak.database import Base, engine
from fastbreak.dependencies import get_http_client
from fastbreak.errors import DomainError, ValidationError

# Import routers
from fastbreak.routers import events, pages

# Import all models so Base.metadata knows about them
from fastbreak.models.event import Event  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Fastbreak Events",
    description="Sports event dashboard with owner-scoped event CRUD over a hosted auth + Postgres backend",
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

# Register routers
app.include_router(pages.router, tags=["Pages"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])


@app.exception_handler(DomainError)
async def handle_domain_error(request: Request, exc: DomainError):
    content = {"code": exc.code.value, "message": exc.message}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(GuardRedirect)
async def handle_guard_redirect(request: Request, exc: GuardRedirect):
    return RedirectResponse(exc.location, status_code=303)


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.STORE_BACKEND == "sql" and settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    if settings.STORE_BACKEND == "hosted" and not settings.SUPABASE_URL:
        logger.warning("STORE_BACKEND is 'hosted' but SUPABASE_URL is not set")


@app.on_event("shutdown")
def on_shutdown():
    if get_http_client.cache_info().currsize:
        get_http_client().close()


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "store_backend": settings.STORE_BACKEND,
        "hosted_url_configured": bool(settings.SUPABASE_URL),
        "anon_key_configured": bool(settings.SUPABASE_ANON_KEY),
    }
