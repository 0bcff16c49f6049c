"""
Main FastAPI application entry point.
Sets up the API, middleware, error handling and routes.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from wallet_service.core.config import settings
from wallet_service.core.logging_config import setup_logging
from wallet_service.database import engine, Base
from wallet_service.ledger.errors import LedgerError
from wallet_service.api import accounts, transfers

setup_logging(settings.LOG_LEVEL)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc"  # ReDoc UI
)

# CORS middleware (allows frontend to call API)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """
    Render ledger failures with their stable code.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.detail}
    )


@app.get("/")
def root():
    """
    Root endpoint - health check.
    """
    return {
        "message": "Wallet Ledger Service",
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "user": f"{settings.API_V1_PREFIX}/user"
        }
    }


@app.get("/health")
def health_check():
    """
    Health check endpoint for monitoring.
    """
    return {
        "status": "healthy",
        "database": "connected"
    }


# Include API routers
app.include_router(accounts.router, prefix=settings.API_V1_PREFIX)
app.include_router(transfers.router, prefix=settings.API_V1_PREFIX)
