"""FastAPI application entry point."""
import logging

import httpx
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from retreat_rsvp.config import settings
from retreat_rsvp.logging_setup import configure_logging
from retreat_rsvp.routers import debug, rsvp
from retreat_rsvp.services.airtable_client import AirtableError

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Retreat RSVP",
    description="RSVP management for retreat attendees, backed by Airtable",
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
app.include_router(rsvp.router, prefix="/api/rsvp", tags=["RSVP"])
app.include_router(debug.router, prefix="/api/debug", tags=["Debug"])


@app.exception_handler(AirtableError)
@app.exception_handler(httpx.TransportError)
async def airtable_error_handler(request: Request, exc: Exception):
    """A failed Airtable request aborts the whole operation; report it as a bad gateway."""
    logger.error("Airtable request failed during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Failed to reach the RSVP data store. Please try again."},
    )


@app.on_event("startup")
def on_startup():
    """Warn early when the Airtable credentials are missing; every fetch would fail."""
    if not settings.AIRTABLE_API_KEY or not settings.AIRTABLE_BASE_ID:
        logger.warning("AIRTABLE_API_KEY / AIRTABLE_BASE_ID not configured; Airtable requests will fail")


@app.get("/api/health")
def health_check():
    return {"status": "ok"}


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("retreat_rsvp.main:app", host="0.0.0.0", port=8000)
