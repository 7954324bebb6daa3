"""
ADA Live AI Analyst - FastAPI Application

Main entry point for the backend API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ada_ta.core.config import settings
from ada_ta.core.logging import setup_logging
from ada_ta.api.v1 import router as api_v1_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Tracking: {settings.coin_name} ({settings.coin_symbol})")

    from ada_ta.services.llm import get_llm_client
    provider = get_llm_client().get_active_provider()
    if provider:
        logger.info(f"LLM provider: {provider.value}")
    else:
        logger.warning("No LLM provider configured - /api/v1/analysis will return 503")

    # Start live polling (server-side dashboard refresh)
    from ada_ta.services.live import start_live_analyst, stop_live_analyst
    if settings.enable_live_polling:
        await start_live_analyst()
    else:
        logger.info("Live polling disabled (enable_live_polling=false)")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await stop_live_analyst()
    from ada_ta.services.market_data import close_market_data_clients
    await close_market_data_clients()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Live multi-timeframe technical analysis with LLM commentary

    ## Architecture
    - **Indicator Engine**: RSI, MACD, moving averages, Bollinger, ATR (NumPy)
    - **Analysis Orchestrator**: fingerprint cache, concurrent narrative generation, timeout with stale fallback
    - **Market Data**: CoinGecko price/candles, Fear & Greed sentiment
    - **Live Analyst**: server-side polling loop

    ## Core Principles
    - LLM does no math, all numbers come from the Indicator Engine
    - Educational analysis, not financial advice
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - allow both frontend ports
cors_origins = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:3001",
]
# Add any additional origins from settings
if settings.allowed_origins:
    cors_origins.extend([o for o in settings.allowed_origins if o not in cors_origins])

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    from ada_ta.services.llm import get_llm_client

    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "llm_configured": get_llm_client().is_configured,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "ADA Live AI Analyst API",
        "docs": "/docs",
        "health": "/health",
    }
