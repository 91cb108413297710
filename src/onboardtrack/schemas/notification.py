from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class Notification(BaseModel):
    """Recruiter-facing record of a background check status change."""

    type: Literal["background_check_update"] = "background_check_update"
    candidate_id: str
    candidate_name: str = ""
    previous_status: str | None = None
    new_status: str
    ibr_id: str | None = None
    message: str
    read: bool = False
    recipient_role: str = "recruiter"
    priority: Literal["normal", "high"] = "normal"
    created_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")
