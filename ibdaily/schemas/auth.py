from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SessionRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    firebase_uid: str = Field(..., min_length=1, max_length=128)
    name: str | None = Field(default=None, max_length=255)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: UUID
    issued_at: datetime
    expires_at: datetime
    server_time: datetime
