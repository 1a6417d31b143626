"""
FastAPI application entry point.
"""

from fastapi import FastAPI

from review_notifier import __version__
from review_notifier.config import settings
from review_notifier.api import webhooks
from review_notifier.services.notification_sync import get_notification_sync
from review_notifier.utils.logging import setup_logging, get_logger

# Configure structured logging
setup_logging(settings.log_level)

logger = get_logger(__name__)

app = FastAPI(
    title="Review Notifier",
    description="Mirrors GitHub pull request reviews into Rocket.Chat team rooms",
    version=__version__
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Review Notifier API",
        "version": __version__,
        "docs": "/docs"
    }


app.include_router(webhooks.router)


@app.on_event("startup")
async def startup_event():
    """Open collaborator connections on application startup."""
    logger.info("Starting Review Notifier API")

    sync = get_notification_sync()
    await sync.initialize()
    logger.info(f"Notification sync initialized with {len(sync.resolver.team_rooms)} team room(s)")


@app.on_event("shutdown")
async def shutdown_event():
    """Close collaborator connections on application shutdown."""
    logger.info("Shutting down Review Notifier API")

    await get_notification_sync().close()
    logger.info("Notification sync closed")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
