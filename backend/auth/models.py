from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request model for user registration"""
    email: EmailStr
    password: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)


class LoginRequest(BaseModel):
    """Request model for user login"""
    email: EmailStr
    password: str = Field(min_length=1)
