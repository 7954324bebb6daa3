"""
Cache module for the analysis pipeline.

Provides the in-memory narrative cache and its fingerprint key.
"""

from ada_ta.services.cache.analysis_cache import (
    AnalysisCache,
    CacheEntry,
    build_fingerprint,
)

__all__ = [
    "AnalysisCache",
    "CacheEntry",
    "build_fingerprint",
]
