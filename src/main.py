"""
Main FastAPI application entry point.
Configures and initializes the Paper Upload API.
"""
import logging
import time
from fastapi import FastAPI, Request
from mangum import Mangum
from src.core.config import settings
from src.core.exception_handler import register_exception_handlers
from src.core.logging_config import setup_logging
from src.api.routes import admin_routes, auth_routes, health_routes, upload_routes

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="PDF upload ingestion and processing-status tracking",
    root_path=f"/{settings.environment}"
)

# Register exception handlers
register_exception_handlers(app)

# Register routes
app.include_router(health_routes.router)
app.include_router(auth_routes.router)
app.include_router(upload_routes.router)
app.include_router(admin_routes.router)


# Access log with latency
@app.middleware("http")
async def log_request(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %s (%.1fms)", request.method, request.url.path, response.status_code, elapsed_ms
    )
    return response

# Lambda handler for AWS
handler = Mangum(app, lifespan="off")


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
