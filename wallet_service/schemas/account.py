"""
Pydantic schemas for account API requests and responses.
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime


class RegisterRequest(BaseModel):
    """Schema for registering a new wallet account."""
    name: str = Field(..., min_length=1, max_length=100, description="Account holder name")
    phone: str = Field(..., min_length=7, max_length=20, pattern=r"^\+?\d+$", description="Phone number, the public identity")
    password: str = Field(..., min_length=1, max_length=128, description="Login password")
    dob: date = Field(..., description="Date of birth")
    pin: str = Field(..., pattern=r"^\d{4,6}$", description="4-6 digit transaction PIN")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Sita Sharma",
                "phone": "9812345678",
                "password": "Secret#123",
                "dob": "1995-04-12",
                "pin": "1234"
            }
        }
    )


class LoginRequest(BaseModel):
    phone: str = Field(..., min_length=1, max_length=20)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    name: str
    phone: str


class ProfileResponse(BaseModel):
    """Public account fields; secrets are never included."""
    id: int
    name: str
    phone: str
    dob: date
    age: int
    balance: int
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class BalanceResponse(BaseModel):
    balance: int


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., max_length=128)
    new_password: str = Field(..., max_length=128)


class MessageResponse(BaseModel):
    msg: str
