"""Quick Recipe Generator API - FastAPI Application."""

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from recipegen.config import get_settings
from recipegen.errors import EmptyPrompt

settings = get_settings()

# Initialize Sentry for error monitoring
if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        # Performance monitoring (20% sample - cost-effective for production)
        traces_sample_rate=0.2,
        # Don't send PII (prompts can contain anything)
        send_default_pii=False,
    )
    print(f"📊 Sentry initialized for {settings.environment}")
else:
    print("📊 Sentry not configured (no SENTRY_DSN)")

from recipegen.routers import generate_router, health_router
from recipegen.routers.generate import error_response

# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Turn the ingredients you have into quick, kid-friendly recipes with AI",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - allow the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",      # Next.js dev
        "*",                          # Allow all for development (restrict in prod)
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router)
app.include_router(generate_router)


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError):
    """Missing, non-string or unparseable prompt bodies are client errors."""
    # Same settings source as the routes, so overrides apply here too
    current = request.app.dependency_overrides.get(get_settings, get_settings)()
    details = str(exc.errors()) if current.is_development else None
    return error_response(400, EmptyPrompt.default_message, details)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.api_title,
        "version": settings.api_version,
        "docs": "/docs",
        "health": "/health",
    }


# Startup/shutdown events
@app.on_event("startup")
async def startup():
    """Run on application startup."""
    print(f"🚀 {settings.api_title} v{settings.api_version}")
    print(f"📍 Environment: {settings.environment}")
    print(f"📚 Docs: http://localhost:8000/docs")


@app.on_event("shutdown")
async def shutdown():
    """Run on application shutdown."""
    print("👋 Shutting down Quick Recipe Generator API")
