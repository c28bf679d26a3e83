"""User data model for LRH Flow."""

from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Authorization role."""
    CEO = "CEO"
    EXECUTIVE = "EXECUTIVE"
    USER = "USER"


class User(BaseModel):
    """User model for LRH Flow."""

    id: str = Field(..., description="Unique user identifier")
    email: str = Field(..., description="User email address")
    name: str = Field(..., description="User display name")
    role: UserRole = Field(UserRole.USER, description="Authorization role")
    supervisor_id: Optional[str] = Field(None, description="Direct supervisor (for overdue escalation)")
    created_at: datetime = Field(..., description="User creation timestamp")
    updated_at: datetime = Field(..., description="User last update timestamp")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
