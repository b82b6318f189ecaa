from datetime import datetime
from typing import Optional
from pydantic import Field

from ..schemas import CamelModel, RequestModel


class UserSchema(CamelModel):
    id: int
    username: str
    created_at: Optional[datetime] = None


class CredentialsSchema(RequestModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=256)


class TokenSchema(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSchema
