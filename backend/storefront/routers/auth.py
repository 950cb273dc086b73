"""
storefront/routers/auth.py - Sign-up / login / logout.

Passwords never touch this service's storage: accounts live in Firebase Auth.
- `POST /auth/register`: creates the Firebase user (Admin SDK) and the
  `users/{uid}` profile, then signs in to return tokens when a Web API key is set.
- `POST /auth/login`: proxies Firebase `signInWithPassword` and returns the
  ID token / refresh token pair.
- `POST /auth/logout`: revokes the user's refresh tokens on every device.
"""
import logging
from typing import Any, Dict

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from firebase_admin import auth as firebase_auth
from firebase_admin.exceptions import FirebaseError

from storefront.config import get_firebase_app, settings
from storefront.core.security import get_current_user
from storefront.deps import get_user_store
from storefront.repositories.users import UserStore
from storefront.schemas.user import (
    LoginRequest, LoginResponse, RegisterBody, RegisterResponse, UserProfile,
)

logger = logging.getLogger("storefront.auth")

router = APIRouter(prefix="/auth", tags=["Auth"])

FIREBASE_SIGNIN_ENDPOINT = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"


class SignInFailed(Exception):
    pass


def _create_firebase_user(email: str, password: str, display_name: str) -> str:
    try:
        user = firebase_auth.create_user(
            email=email, password=password, display_name=display_name, app=get_firebase_app(),
        )
    except firebase_auth.EmailAlreadyExistsError:
        raise HTTPException(status_code=400, detail="Email already registered")
    except (FirebaseError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Could not create account: {exc}")
    return user.uid


async def _sign_in(email: str, password: str) -> Dict[str, Any]:
    """Firebase Identity Toolkit password sign-in; raises SignInFailed with Firebase's message."""
    if not settings.firebase_web_api_key:
        raise SignInFailed("Server misconfigured: missing FIREBASE_WEB_API_KEY")
    payload = {"email": email, "password": password, "returnSecureToken": True}
    async with httpx.AsyncClient(timeout=10) as client:
        resp = await client.post(
            FIREBASE_SIGNIN_ENDPOINT, params={"key": settings.firebase_web_api_key}, json=payload,
        )
    data = resp.json()
    if resp.status_code != 200:
        raise SignInFailed(data.get("error", {}).get("message", "Invalid credentials"))
    return data


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterBody, users: UserStore = Depends(get_user_store)):
    uid = _create_firebase_user(body.email, body.password, body.full_name)

    if users.get(uid) is not None:
        raise HTTPException(400, "Email already registered")
    profile = users.create(uid, {
        "full_name": body.full_name,
        "email": body.email,
        "phone": body.phone,
        "role": "customer",
        "is_guest": False,
    })

    # Auto-login when possible; registration itself already succeeded.
    id_tok, refresh_tok, exp = "", "", 0
    if settings.firebase_web_api_key:
        try:
            data = await _sign_in(body.email, body.password)
            id_tok, refresh_tok, exp = data["idToken"], data["refreshToken"], int(data["expiresIn"])
        except (SignInFailed, httpx.HTTPError) as exc:
            logger.warning("Login after register failed for %s: %s", uid, exc)

    return RegisterResponse(
        user_id=uid,
        user=UserProfile(**profile),
        id_token=id_tok,
        refresh_token=refresh_tok,
        expires_in=exp,
    )


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest):
    """Proxies to Firebase and returns id_token + refresh_token."""
    try:
        data = await _sign_in(body.email, body.password)
    except SignInFailed as exc:
        logger.info("Firebase login failed: %s", exc)
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    except httpx.HTTPError as exc:
        logger.exception("Firebase login request failed")
        raise HTTPException(status_code=502, detail=f"Authentication service error: {exc}")

    return LoginResponse(
        id_token=data["idToken"],
        refresh_token=data["refreshToken"],
        expires_in=int(data["expiresIn"]),
        user_id=data["localId"],
    )


@router.post("/logout")
def logout(current_user: dict = Depends(get_current_user)):
    """
    Revokes refresh tokens on all devices.
    The client should also call signOut() in the Firebase SDK.
    """
    try:
        firebase_auth.revoke_refresh_tokens(current_user["id"], app=get_firebase_app())
    except firebase_auth.UserNotFoundError:
        logger.info("Logout for unknown Firebase user %s", current_user["id"])
    return {"ok": True}
