"""
Data Transfer Objects for authentication endpoints.
"""
from pydantic import BaseModel, Field
from src.models.actor import Role


class LoginRequest(BaseModel):
    """Request model for user login."""
    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., min_length=1, description="Password")


class LoginResponse(BaseModel):
    """Response model for successful login."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    username: str = Field(..., description="Authenticated username")
    role: Role = Field(..., description="Role granted by the token")
