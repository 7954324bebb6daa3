"""
Live polling loop for the dashboard.
"""

from ada_ta.services.live.analyst import (
    LiveAnalyst,
    get_live_analyst,
    start_live_analyst,
    stop_live_analyst,
)

__all__ = [
    "LiveAnalyst",
    "get_live_analyst",
    "start_live_analyst",
    "stop_live_analyst",
]
