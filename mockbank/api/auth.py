import logging
from typing import List, Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from mockbank.core.auth import create_token
from mockbank.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

Role = Literal["student", "admin"]


class DevLogin(BaseModel):
    user_id: str = Field(min_length=1, max_length=255)
    roles: List[Role] = Field(default_factory=lambda: ["student"], min_length=1)


class DevToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    roles: List[Role]


@router.post("/mock-login", response_model=DevToken)
def mock_login(payload: DevLogin):
    """Issue a bearer token for any user id. Disabled in production."""
    if settings.is_production():
        raise HTTPException(status_code=404, detail="Not Found")
    logger.info("Issuing development token for %s with roles %s", payload.user_id, payload.roles)
    return DevToken(
        access_token=create_token(payload.user_id, list(payload.roles)),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        roles=payload.roles,
    )
