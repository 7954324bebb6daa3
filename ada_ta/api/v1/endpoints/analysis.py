"""
Analysis API Endpoints

Multi-timeframe narrative analysis from raw candle data.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ada_ta.schemas.analysis import AnalysisResponse, ErrorResponse
from ada_ta.schemas.market import AnalysisRequest
from ada_ta.services.analysis import AnalysisOrchestrator, get_analysis_orchestrator
from ada_ta.services.base import (
    AnalysisTimeoutError,
    ConfigurationError,
    GenerationError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "",
    response_model=AnalysisResponse,
    responses={
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def create_analysis(
    request: AnalysisRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_analysis_orchestrator),
):
    """
    Generate very-short, short and long term narratives.

    - Served from cache when price and key indicators are unchanged (5 min TTL)
    - 504 when generation times out and no earlier result exists
    - 503 when no LLM provider is configured
    - 500 with the provider's message on any other failure
    """
    try:
        return await orchestrator.execute(request)
    except AnalysisTimeoutError as e:
        return _error(504, e.message)
    except ConfigurationError as e:
        logger.warning(f"Analysis unavailable: {e.message}")
        return _error(503, e.message)
    except GenerationError as e:
        return _error(500, e.message)
    except Exception as e:
        logger.error(f"LLM API error: {e}")
        return _error(500, str(e))
