"""Activity log entity."""

from datetime import datetime

from pydantic import BaseModel, Field


class ActivityLog(BaseModel):
    """An audit trail entry written after a successful operation."""

    id: int | None = None
    user_id: str | None = None
    user_name: str | None = None
    action: str
    details: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Operator(BaseModel):
    """The signed-in user performing an operation."""

    user_id: str | None = None
    user_name: str | None = None
