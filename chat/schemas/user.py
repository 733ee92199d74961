"""
Pydantic schemas for signup and login.
"""
from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Request schema for POST /users and POST /login."""
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {"username": "alice", "password": "hunter2"}
        }
    }


class CreateUserResponse(BaseModel):
    """Response schema for POST /users."""
    id: int


class LoginResponse(BaseModel):
    """Response schema for POST /login."""
    id: int
    token: str
