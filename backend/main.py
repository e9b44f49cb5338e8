"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from api import accounts, networth, plaid, transactions
from config import settings
from database import get_db, init_db
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup."""
    init_db()
    logger.info("Database ready (environment=%s)", settings.ENVIRONMENT)
    yield


app = FastAPI(
    title="Finance Tracker",
    description="Personal finance aggregation: balances, transactions and net worth",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted({settings.FRONTEND_URL, "http://localhost:3000"}),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(plaid.router)
app.include_router(accounts.router)
app.include_router(transactions.router)
app.include_router(networth.router)


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint. Reports whether the database answers."""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except Exception:
        logger.warning("Health check database query failed", exc_info=True)
        database = "unavailable"
    return {"status": "ok", "database": database}
