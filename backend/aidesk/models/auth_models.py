from pydantic import BaseModel, Field, validator
from datetime import datetime
from typing import Any, Dict, Optional


class RegisterRequest(BaseModel):
    """Request model for account creation"""
    name: str = Field(..., min_length=1, max_length=100, description="User's display name")
    email: str = Field(..., min_length=1, max_length=254, description="Login email, stored exactly as given")
    password: str = Field(..., min_length=1, max_length=128, description="User's password")

    @validator('name')
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name cannot be empty or whitespace only')
        return v.strip()


class LoginRequest(BaseModel):
    """Request model for sign in"""
    email: str = Field(..., min_length=1, max_length=254, description="Login email")
    password: str = Field(..., min_length=1, max_length=128, description="User's password")


class SessionUserResponse(BaseModel):
    """Response model for the signed-in user"""
    id: int
    name: str
    email: str
    preferences: Dict[str, Any] = Field(default_factory=dict)


class RegisterResponse(BaseModel):
    """Response model for account creation"""
    success: bool
    user_id: Optional[int] = None
    reason: Optional[str] = None
    message: str


class LoginResponse(BaseModel):
    """Response model for sign in"""
    success: bool
    user: Optional[SessionUserResponse] = None
    reason: Optional[str] = None
    message: str


class SessionStatusResponse(BaseModel):
    """Response model for session status"""
    is_authenticated: bool
    user: Optional[SessionUserResponse] = None


class ValidateSessionResponse(BaseModel):
    """Response model for an explicit session check"""
    valid: bool


class SignalAccepted(BaseModel):
    """Response model for fire-and-forget signals"""
    accepted: bool = True
    signal: str


class UserResponse(BaseModel):
    """Response model for a registered user's public identity"""
    id: int
    name: str
    email: str
    created_at: Optional[datetime] = None
