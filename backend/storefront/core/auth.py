# storefront/core/auth.py
"""
Bearer token verification.

A request is authenticated by a Firebase ID token. The decoded claims become a
`Principal` whose role is guest (anonymous sign-in), admin (custom claim) or user.
Development tokens `mock_jwt_token_<uid>` are accepted only with ALLOW_MOCK_TOKENS.
"""
import logging
from typing import Optional

from fastapi import HTTPException, Request, status
from firebase_admin import auth as fb_auth

from storefront.config import settings, get_firebase_app
from storefront.schemas.principal import Principal

logger = logging.getLogger("storefront.auth")

MOCK_TOKEN_PREFIX = "mock_jwt_token_"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_bearer_token(request: Request) -> Optional[str]:
    """Token from `Authorization: Bearer <id_token>`, or None."""
    scheme, _, token = (request.headers.get("Authorization") or "").strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        return None
    return token


def decode_id_token(id_token: str) -> dict:
    """Verified claims of `id_token` (revocation checked). Raises 401 otherwise."""
    if id_token.startswith(MOCK_TOKEN_PREFIX):
        if not settings.allow_mock_tokens:
            raise _unauthorized("Mock tokens are disabled")
        return _mock_claims(id_token[len(MOCK_TOKEN_PREFIX):])

    try:
        return fb_auth.verify_id_token(id_token, app=get_firebase_app(), check_revoked=True)
    except fb_auth.ExpiredIdTokenError:
        raise _unauthorized("Token expired. Please log in again.")
    except fb_auth.RevokedIdTokenError:
        raise _unauthorized("Session revoked")
    except (fb_auth.InvalidIdTokenError, ValueError) as exc:
        logger.info("Rejected ID token: %s", exc)
        raise _unauthorized("Token is not valid")


def _mock_claims(uid: str) -> dict:
    # uids containing "admin" carry the admin claim, "anonymous" ones sign in anonymously
    if not uid:
        raise _unauthorized("Invalid mock token format")
    provider = "anonymous" if "anonymous" in uid else "password"
    return {
        "uid": uid,
        "email": f"{uid}@example.com",
        "firebase": {"sign_in_provider": provider},
        "admin": "admin" in uid,
    }


def token_to_principal(claims: dict) -> Principal:
    uid = claims.get("uid") or claims.get("user_id")
    if not uid:
        raise _unauthorized("Token missing uid.")

    if (claims.get("firebase") or {}).get("sign_in_provider") == "anonymous":
        role = "guest"
    else:
        role = "admin" if claims.get("admin") is True else "user"
    return Principal(uid=uid, role=role, email=claims.get("email"), display_name=claims.get("name"))


# FastAPI dependencies

async def get_optional_principal(request: Request) -> Optional[Principal]:
    """Public endpoints: verifies a token when one is sent, None otherwise."""
    token = extract_bearer_token(request)
    return token_to_principal(decode_id_token(token)) if token else None


async def get_principal(request: Request) -> Principal:
    token = extract_bearer_token(request)
    if token is None:
        raise _unauthorized("No token, authorization denied")
    return token_to_principal(decode_id_token(token))
