"""
Shared-key guard for the HTTP API.
Every /api route depends on verify_api_key; the key comes from SIGIL_API_KEY.
"""
from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader
import os
import secrets

API_KEY = os.getenv("SIGIL_API_KEY", "sigil-dev-key")

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)) -> str:
    """Reject requests whose X-API-Key header is missing or wrong"""
    if not api_key or not secrets.compare_digest(api_key, API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key"
        )
    return api_key
