"""
verify.py
---------
Purpose:
    JWT verification for dashboard callers using Supabase JWKS (ES256).

Notes:
    - Mirrors the JWT check Supabase applies in front of edge functions.
    - Enforced only when REQUIRE_AUTH is set; local development runs open.
    - The JWKS client is created on first use and caches signing keys.
"""

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from crm_dashboard.config import settings

SUPABASE_AUDIENCE = "authenticated"
ANONYMOUS_CLAIMS = {"sub": None, "role": "anon"}

_jwk_client: PyJWKClient | None = None
_security = HTTPBearer(auto_error=False)


def _get_jwk_client() -> PyJWKClient:
    global _jwk_client
    if _jwk_client is None:
        jwks_url = settings.jwks_url()
        if not jwks_url:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Authentication is required but SUPABASE_URL is not configured",
            )
        _jwk_client = PyJWKClient(jwks_url)
    return _jwk_client


def verify_jwt(token: str) -> dict:
    try:
        signing_key = _get_jwk_client().get_signing_key_from_jwt(token)
        decoded = jwt.decode(
            token,
            signing_key.key,
            algorithms=["ES256"],
            audience=SUPABASE_AUDIENCE,
            options={"verify_exp": True},
        )
        return decoded
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def auth_dependency(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
) -> dict:
    if not settings.REQUIRE_AUTH:
        return dict(ANONYMOUS_CLAIMS)
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return verify_jwt(credentials.credentials)
