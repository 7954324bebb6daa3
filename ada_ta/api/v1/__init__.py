"""
API v1 Router

All API endpoints for the dashboard.
"""

from fastapi import APIRouter

from ada_ta.api.v1.endpoints import analysis, indicators, market

router = APIRouter()

# Include all endpoint routers
router.include_router(analysis.router, prefix="/analysis", tags=["Analysis"])
router.include_router(indicators.router, prefix="/indicators", tags=["Indicators"])
router.include_router(market.router, prefix="/market", tags=["Market Data"])
