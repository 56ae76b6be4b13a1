"""API response schemas."""

from pydantic import BaseModel, Field

from tasktrack.models import Task, UserSummary


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    connections: int = Field(0, description="Live push connections")


class MessageResponse(BaseModel):
    message: str


class TaskMutationResponse(BaseModel):
    """Create/update task response."""

    message: str
    task: Task


class AuthResponse(BaseModel):
    """Register/login response. The token is also set as a cookie."""

    message: str
    user: UserSummary
    token: str


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserSummary
