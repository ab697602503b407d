"""Common Pydantic schemas."""
from pydantic import BaseModel, Field


class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    
    model_config = {
        "from_attributes": True,
        "validate_assignment": True,
        "arbitrary_types_allowed": True,
    }


class MessageResponse(BaseSchema):
    """Plain acknowledgement."""
    
    message: str = Field(..., description="Human readable result")


class ErrorResponse(BaseSchema):
    """Error response schema; extra keys may be merged in."""
    
    model_config = {"extra": "allow"}

    message: str = Field(..., description="Error message")


class HealthResponse(BaseSchema):
    """Health check response."""
    
    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
