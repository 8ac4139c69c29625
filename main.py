"""
Polleria Back-Office - WhatsApp Order Intake
FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from polleria.core import settings, engine, Base
from polleria.core.logging_config import setup_logging
from polleria.api import api_router

setup_logging(settings)
logger = logging.getLogger(__name__)

# Lifespan for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create tables if not exist
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.APP_NAME} starting on port {settings.APP_PORT}")
    if not settings.whatsapp_configured:
        logger.warning("WhatsApp Business API not configured, confirmations will not be sent")
    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set, using the keyword interpreter")
    
    yield
    
    logger.info(f"{settings.APP_NAME} shutting down")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="WhatsApp order intake for a chicken production and delivery business",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers
app.include_router(api_router, prefix="/api")

# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.APP_NAME}

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.APP_PORT,
        reload=settings.DEBUG
    )
