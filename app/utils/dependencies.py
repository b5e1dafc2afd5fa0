from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader, HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from uuid import UUID
import os
import secrets

from app.utils.security import (
    ADMIN_CLAIM,
    TRUSTED_MEMBER_CLAIM,
    USER_ID_CLAIM,
    decode_token,
    has_flag,
)

# Requests authenticated with the API key act as this user
API_KEY_USER_ID = UUID("00000000-0000-0000-0000-000000000000")

security = HTTPBearer(auto_error=False)
api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


def _api_key_matches(api_key: Optional[str]) -> bool:
    expected = os.getenv("API_KEY")
    return bool(expected and api_key and secrets.compare_digest(api_key, expected))


def _user_id_from(claims: dict) -> UUID:
    try:
        return UUID(str(claims[USER_ID_CLAIM]))
    except (KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


# Dependency to read the bearer token claims, if any
async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[dict]:
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return payload


async def get_optional_user_id(claims: Optional[dict] = Depends(get_token_claims)) -> Optional[UUID]:
    """Anonymous callers get None"""
    if claims is None:
        return None
    return _user_id_from(claims)


async def get_current_user_id(claims: Optional[dict] = Depends(get_token_claims)) -> UUID:
    if claims is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return _user_id_from(claims)


async def require_admin(
    claims: Optional[dict] = Depends(get_token_claims),
    api_key: Optional[str] = Depends(api_key_header),
) -> UUID:
    if _api_key_matches(api_key):
        return API_KEY_USER_ID
    if claims is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    if not has_flag(claims, ADMIN_CLAIM):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return _user_id_from(claims)


async def require_trusted_member(
    claims: Optional[dict] = Depends(get_token_claims),
    api_key: Optional[str] = Depends(api_key_header),
) -> UUID:
    """Admins count as trusted members"""
    if _api_key_matches(api_key):
        return API_KEY_USER_ID
    if claims is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    if not (has_flag(claims, ADMIN_CLAIM) or has_flag(claims, TRUSTED_MEMBER_CLAIM)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Trusted member access required")
    return _user_id_from(claims)
