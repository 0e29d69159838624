"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Registry lifecycle (created on startup, dropped on shutdown)

Run locally with:
    uvicorn shortlinks.main:app --port 5000
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shortlinks.api import endpoints
from shortlinks.middleware.logging import add_logging_middleware
from shortlinks.core.registry_manager import initialize_registry, shutdown_registry

app = FastAPI(
    title="URL Shortener Service",
    description="Batch URL shortening with custom shortcodes and expiry",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

add_logging_middleware(app)

# The form front end is served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health endpoints defined before router to match before catch-all route
@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint for health checks.
    """
    return {
        "message": "URL Shortener Service",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy"}


app.include_router(endpoints.router, tags=["URL Shortener"])


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    await initialize_registry()


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    await shutdown_registry()
