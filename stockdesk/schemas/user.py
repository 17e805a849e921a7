# stockdesk/schemas/user.py
from pydantic import BaseModel, ConfigDict, EmailStr
from datetime import datetime
from typing import Optional


# Credentials submitted by the login form
class UserLogin(BaseModel):
    email: EmailStr
    password: str


# User profile as returned by the backend
class UserProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Tokens issued by the backend on successful login
class Token(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user: Optional[UserProfile] = None


# Authenticated caller: the profile plus the token forwarded to the backend
class CurrentUser(BaseModel):
    profile: UserProfile
    token: str
