"""
Follow-up Engine - FastAPI Application

Main entry point for the follow-up scheduling backend.

Architecture:
- Customer snapshot + now → ObligationGenerator → live obligations
- Follow-up log snapshot → reconcile → completed identities, attempt counts
- Both → Queue Projector → today / overdue / upcoming / all pages
- OutcomeRecorder → append-only follow-up ledger
"""
import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import followups_router
from .database import init_db

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Follow-up Engine",
    description="""
    Follow-up Engine - Retention Check-in Scheduler

    Decides, for every active customer branch, whether a check-in call is
    due today, overdue or upcoming, and records call outcomes in an
    append-only ledger.

    ## Milestones
    Calls are due 7, 14, 30, 60 and 90 days after contract start.

    ## Key Principles
    - Obligations are recomputed on every request, never stored
    - The ledger is append-only; history is never edited
    - A completed entry removes its obligation from every live tab
    - Other outcomes count as attempts and keep the obligation live
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(followups_router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Follow-up Engine",
        "version": "1.0.0",
        "description": "Retention check-in scheduler and outcome ledger",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# For running with: python -m followup_engine.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
