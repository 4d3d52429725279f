# saju_client/models/api/auth_request.py
"""
Auth API request models.
Bodies for POST /auth/login and POST /auth/register.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Account registration; birth fields create the saju record at the same time."""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    name: str
    gender: str = Field(..., pattern="^[MF]$", description="M | F")
    birth_year: int
    birth_month: int = Field(..., ge=1, le=12)
    birth_day: int = Field(..., ge=1, le=31)
    birth_hour: int | None = Field(default=None, ge=0, le=23)
    birth_minute: int | None = Field(default=None, ge=0, le=59)
    unknown_time: bool | None = None
    birth_place: str = ""
    is_lunar: bool = False
