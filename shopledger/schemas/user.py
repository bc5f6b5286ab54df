from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, description="Unique login name")
    password: str = Field(..., min_length=6, max_length=72, description="Plain password (will be hashed). Minimum 6 characters.")
    role: Literal["owner", "staff"] = Field(..., description="owner or staff")

class UserResponse(BaseModel):
    id: int
    username: str
    role: Literal["owner", "staff"]
    created_at: datetime

    class Config:
        from_attributes = True

class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
