from pydantic import BaseModel, EmailStr, Field
from typing import Optional

# ======================
# TOKEN SCHEMAS
# ======================

class Token(BaseModel):
    access_token: str
    token_type: str
    # "student" or "admin"
    role: str
    # Admin tokens carry scope "admin" and expire sooner
    scope: Optional[str] = None
    expires_in: Optional[int] = None

class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None
    scope: Optional[str] = None


# ======================
# USER AUTHENTICATION SCHEMAS
# ======================

class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str
