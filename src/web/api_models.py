from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class DetectionResponse(BaseModel):
    present: bool = Field(..., description="True while a note is tracked")
    label: Optional[str] = None
    currency: Optional[str] = None
    amount: Optional[str] = None
    summary: Optional[str] = Field(None, description="Accessibility text, e.g. 'AUD 50'")
    since: Optional[float] = Field(None, description="When the current note appeared")
    last_event: Optional[str] = Field(None, description="appeared|still_present|disappeared")
    last_event_ts: Optional[float] = None


class StatusResponse(BaseModel):
    status: str = Field(..., description="running|degraded|offline")
    alerts: list[str]
    last_frame_age: Optional[float]
    uptime_seconds: Optional[int]
    method: Optional[str]
    frames_seen: int = 0
    frames_processed: int = 0
    events_emitted: int = 0
    tracking: bool = False
    timestamp: float
