"""Main FastAPI application."""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dealroom.config import settings
from dealroom.core.exceptions import DealRoomError
from dealroom.api import users, templates, deals, invitations, selections, compromise, signing, events

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Deal Room API",
    version="1.0.0",
    description="Two parties negotiate a multi-clause contract; the service proposes fair compromises clause by clause"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(
    users.router,
    prefix=f"{settings.API_V1_PREFIX}/users",
    tags=["users"]
)
app.include_router(
    templates.router,
    prefix=f"{settings.API_V1_PREFIX}/templates",
    tags=["templates"]
)
app.include_router(
    deals.router,
    prefix=f"{settings.API_V1_PREFIX}/deals",
    tags=["deals"]
)
app.include_router(
    invitations.router,
    prefix=f"{settings.API_V1_PREFIX}",
    tags=["invitations"]
)
app.include_router(
    selections.router,
    prefix=f"{settings.API_V1_PREFIX}",
    tags=["selections"]
)
app.include_router(
    compromise.router,
    prefix=f"{settings.API_V1_PREFIX}",
    tags=["compromise"]
)
app.include_router(
    signing.router,
    prefix=f"{settings.API_V1_PREFIX}",
    tags=["signing"]
)
app.include_router(
    events.router,
    prefix=f"{settings.API_V1_PREFIX}",
    tags=["events"]
)


@app.on_event("startup")
async def startup():
    """Application startup tasks."""
    logger.info(f"Deal Room API starting (environment: {settings.ENVIRONMENT})")


@app.on_event("shutdown")
async def shutdown():
    """Application shutdown tasks."""
    logger.info("Deal Room API shutting down")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Deal Room API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
    }


# Global exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(DealRoomError)
async def deal_room_exception_handler(request: Request, exc: DealRoomError):
    """Render service errors with their message passed through verbatim."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"code": exc.code, "message": exc.message}}
    )

