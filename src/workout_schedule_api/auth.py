"""
Identity resolution for the schedule endpoints.

Resolves the caller's user id from an API key or a Clerk JWT. The id is
passed explicitly into every call that reads user-scoped records; nothing
below the route layer looks up the current user on its own.
"""
import logging
import os
from typing import Optional

import jwt
from fastapi import Header, HTTPException

logger = logging.getLogger(__name__)

_jwks_client: Optional[jwt.PyJWKClient] = None
_jwks_url: Optional[str] = None


def get_jwks_client() -> Optional[jwt.PyJWKClient]:
    """Return a JWKS client for the configured Clerk domain, or None if unset."""
    global _jwks_client, _jwks_url
    domain = os.getenv("CLERK_DOMAIN", "")
    if not domain:
        return None
    url = f"https://{domain}/.well-known/jwks.json"
    if _jwks_client is None or _jwks_url != url:
        _jwks_client = jwt.PyJWKClient(url)
        _jwks_url = url
    return _jwks_client


def validate_api_key(api_key: str) -> str:
    """
    Validate an API key and return the user id it acts for.

    Key formats:
    - "sk_test_abc123"            -> "admin"
    - "sk_test_abc123:user_12345" -> "user_12345"
    """
    valid_keys = [k.strip() for k in os.getenv("API_KEYS", "").split(",") if k.strip()]
    if not valid_keys:
        logger.warning("No API keys configured (API_KEYS env var empty)")
        raise HTTPException(status_code=401, detail="API key authentication not configured")

    key_part, _, user_id = api_key.partition(":")
    if key_part not in valid_keys:
        raise HTTPException(status_code=401, detail="Invalid API key")
    return user_id or "admin"


def validate_jwt(authorization: str) -> str:
    """Validate a Clerk bearer token and return its subject."""
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = authorization.split(" ", 1)[1]
    jwks_client = get_jwks_client()
    if not jwks_client:
        raise HTTPException(
            status_code=500,
            detail="JWT validation not configured (missing CLERK_DOMAIN)"
        )

    try:
        signing_key = jwks_client.get_signing_key_from_jwt(token)
        payload = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            options={"verify_aud": False}
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token missing user ID")
    return user_id


async def get_current_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key")
) -> str:
    """Authenticate via API key or Clerk JWT and return the user id."""
    if x_api_key:
        return validate_api_key(x_api_key)
    if authorization:
        return validate_jwt(authorization)
    raise HTTPException(
        status_code=401,
        detail="Missing authentication. Provide Authorization header or X-API-Key."
    )


async def get_optional_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key")
) -> Optional[str]:
    """
    Return the user id if credentials were sent, None if none were.

    Anonymous callers only see public records. Credentials that are sent
    but fail validation are rejected rather than treated as anonymous.
    """
    if not x_api_key and not authorization:
        return None
    return await get_current_user(authorization, x_api_key)
