"""
FastAPI Application Entry Point - Storefront order service
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from storefront.config import settings
from storefront.database import init_db
from storefront.logging_config import configure_logging
from storefront.api import orders, products, health
from storefront.api.errors import register_exception_handlers

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Storefront Service",
    description="Cash-on-delivery order intake, stock reservation and order workflow",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(health.router)
app.include_router(orders.router)
app.include_router(products.router)
app.include_router(products.campaign_router)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.on_event("startup")
def startup_event():
    """Initialize logging and database on startup"""
    configure_logging()
    logger.info("Starting %s...", settings.SERVICE_NAME)
    init_db()
    logger.info("Database initialized")
    logger.info("Event publishing %s", "enabled" if settings.EVENTS_ENABLED else "disabled")
    logger.info("%s is running on port %s", settings.SERVICE_NAME, settings.SERVICE_PORT)


@app.on_event("shutdown")
def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down %s...", settings.SERVICE_NAME)
