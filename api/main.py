"""
Storefront Platform API - Main Application.

FastAPI application with CORS enabled for frontend communication.

Environment variables (besides the Supabase ones in repositories.client):
- LOG_LEVEL (default: INFO)
- CORS_ALLOWED_ORIGINS: comma separated origins (default: *)
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from repositories.client import env_path

load_dotenv(dotenv_path=env_path)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def _allowed_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


# Create FastAPI application
app = FastAPI(
    title="Storefront Platform API",
    description="Storefront and back-office API: catalog, orders, documents and client accounts",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

allowed_origins = _allowed_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    # Browsers reject credentialed requests to a wildcard origin.
    allow_credentials=allowed_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "storefront-platform-api"
    }


@app.get("/", tags=["Root"])
def root():
    return {
        "message": "Storefront Platform API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import auth, clients, dashboard, documents, orders, products

app.include_router(auth.router, prefix="/api/v1", tags=["Auth"])
app.include_router(products.router, prefix="/api/v1", tags=["Products"])
app.include_router(orders.router, prefix="/api/v1", tags=["Orders"])
app.include_router(documents.router, prefix="/api/v1", tags=["Documents"])
app.include_router(clients.router, prefix="/api/v1", tags=["Clients"])
app.include_router(dashboard.router, prefix="/api/v1", tags=["Dashboard"])
