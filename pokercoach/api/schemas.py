"""
Pydantic Schemas for API - Response models for the HTTP surface.

The photo routes keep the field names the browser preview and the
classifier already rely on (camelCase). The v1 routes use snake_case.
"""

from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Photo routes
# =============================================================================

class LatestPhotoResponse(BaseModel):
    """Metadata for the most recent capture."""
    requestId: str
    timestamp: int = Field(description="Capture time, epoch milliseconds")
    hasPhoto: bool = True


class ErrorResponse(BaseModel):
    error: str


# =============================================================================
# v1 routes
# =============================================================================

class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    package_name: str
    active_sessions: int = 0


class SessionInfo(BaseModel):
    """Snapshot of one coaching session."""
    session_id: str
    user_id: str
    stage: str
    hole: list[str] = Field(default_factory=list)
    board: list[str] = Field(default_factory=list)
    busy: bool = False
    context_length: int = 1
    created_at: float


class SessionListResponse(BaseModel):
    sessions: list[SessionInfo]
    count: int


class PressResultMessage(BaseModel):
    """Sent to the device after each button press is handled."""
    type: str = "press_result"
    outcome: str
    stage: str
    detected: list[str] = Field(default_factory=list)
    win_probability: Optional[float] = None
    tip: Optional[str] = None
    error: Optional[str] = None
