from __future__ import annotations

import time
from typing import List, Optional

from fastapi import APIRouter

from ..state import state
from ..api_models import DetectionResponse, StatusResponse

router = APIRouter()


def _derive_status(last_frame_age: Optional[float]):
    """
    Lightweight status classifier used by /api/status.
    Thresholds: >10s last frame => offline; >2s => degraded.
    """
    level = "running"
    alerts: List[str] = []
    if last_frame_age is None or last_frame_age > 10:
        level = "offline"
        alerts.append("camera_offline")
    elif last_frame_age > 2:
        level = "degraded"
        alerts.append("camera_stale")
    return level, alerts


@router.get("/detection", response_model=DetectionResponse)
def detection():
    """Currently tracked note, if any."""
    return state.get_detection_copy()


@router.get("/status", response_model=StatusResponse)
def status():
    """
    Runtime status for monitoring.
    Fields:
    - status: running|degraded|offline
    - alerts: list of strings (camera_offline, camera_stale)
    - last_frame_age: seconds since last frame was seen (None if never)
    - uptime_seconds: uptime derived from system_stats.start_time
    - frames_seen / frames_processed / events_emitted: session counters
    - tracking: True while a note is present
    """
    now = time.time()
    sys_stats = state.get_system_stats_copy()
    start_time = sys_stats.get("start_time") or None
    uptime = now - start_time if start_time else None
    last_frame_ts = sys_stats.get("last_frame_ts")
    last_frame_age = now - last_frame_ts if last_frame_ts else None

    level, alerts = _derive_status(last_frame_age)

    return {
        "status": level,
        "alerts": alerts,
        "last_frame_age": last_frame_age,
        "uptime_seconds": int(uptime) if uptime is not None else None,
        "method": sys_stats.get("method"),
        "frames_seen": sys_stats.get("frames_seen", 0),
        "frames_processed": sys_stats.get("frames_processed", 0),
        "events_emitted": sys_stats.get("events_emitted", 0),
        "tracking": state.get_detection_copy()["present"],
        "timestamp": now,
    }
