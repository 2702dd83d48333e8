from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Literal, Optional
from datetime import datetime

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Registration form sent by the web client
class UserCreate(UserBase):
    name: str = Field(min_length=1)
    password: str = Field(min_length=6)
    confirmPassword: Optional[str] = None
    phone: Optional[str] = None
    userType: Literal["farmer", "buyer"] = "buyer"
    region: Optional[str] = None
    profilePhoto: Optional[str] = None

# Public profile of a user
class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    role: str
    phone: Optional[str] = None
    region: Optional[str] = None
    profile_photo: Optional[str] = None
    created_at: Optional[datetime] = None

# Login / register response: the user plus its bearer token
class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"

# Schema for administrative role updates
class RoleUpdate(BaseModel):
    role: Literal["farmer", "buyer", "admin"]
