"""Response schemas for the inbound email webhook."""

from pydantic import BaseModel, Field


class InboundEmailAccepted(BaseModel):
    """Returned for processed, duplicate and dropped deliveries alike."""
    success: bool = Field(True, description="Delivery was accepted")


class InboundEmailError(BaseModel):
    error: str = Field(..., description="Human readable error")
