"""
System-level Pydantic schemas for the hookrelay API.

Handles validation and serialization of the health check response.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class HealthCheck(BaseModel):
    """
    Health check response.

    Attributes:
        status: Always "healthy" while the process answers requests
        timestamp: Server time of the response
        uptime: Process uptime in seconds
    """

    model_config = ConfigDict(from_attributes=True)

    status: str = "healthy"
    timestamp: datetime
    uptime: float

    @field_validator('uptime')
    @classmethod
    def validate_uptime(cls, v: float) -> float:
        """Validate uptime is non-negative."""
        if v < 0:
            raise ValueError('uptime must be non-negative')
        return v
