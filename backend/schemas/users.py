# Pydantic schemas for user-related requests/responses
# Fields are optional on input so missing credentials get the API's own 400 message.

from pydantic import BaseModel
from typing import Optional


class UserCreate(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserRead(BaseModel):
    id: int
    username: str


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class TokenRead(BaseModel):
    token: str
