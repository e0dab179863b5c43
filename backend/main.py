"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import accounts, assets, budgets, investments, market_data, transactions
from config import settings
from database import init_db
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup."""
    init_db()
    logger.info("Ledger API started (environment=%s)", settings.ENVIRONMENT)
    yield


app = FastAPI(
    title="Finance Ledger",
    description="Personal finance tracking: accounts, budgets, transactions and investments",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(accounts.router)
app.include_router(assets.router)
app.include_router(budgets.router)
app.include_router(investments.router)
app.include_router(market_data.router)
app.include_router(transactions.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
