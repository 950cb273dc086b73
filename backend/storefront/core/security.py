"""
storefront/core/security.py - Authentication dependencies and role checks.

- `get_current_user`: verifies the bearer token (see `core/auth.py`), then loads
  `users/{uid}`. A missing profile is created from the token claims with
  `role="customer"`.
- `get_optional_user`: same, but anonymous requests yield None.
- `get_current_admin`: 403 unless the profile role is admin. A new profile
  inherits the role from the token's `admin` claim.
"""
import logging
from typing import Dict, Optional

from fastapi import Depends, HTTPException, status

from storefront.core.auth import get_optional_principal, get_principal
from storefront.deps import get_user_store
from storefront.repositories.users import UserStore
from storefront.schemas.principal import Principal

logger = logging.getLogger("storefront.auth")


def _load_or_create_profile(principal: Principal, users: UserStore) -> Dict:
    user = users.get(principal.uid)
    if user is None:
        logger.info("Creating profile for %s", principal.uid)
        user = users.create(principal.uid, {
            "full_name": principal.display_name or "",
            "email": principal.email or "",
            "phone": "",
            "role": "admin" if principal.role == "admin" else "customer",
            "is_guest": principal.role == "guest",
        })
    return user


def get_current_user(
    principal: Principal = Depends(get_principal),
    users: UserStore = Depends(get_user_store),
) -> Dict:
    return _load_or_create_profile(principal, users)


def get_optional_user(
    principal: Optional[Principal] = Depends(get_optional_principal),
    users: UserStore = Depends(get_user_store),
) -> Optional[Dict]:
    if principal is None:
        return None
    return _load_or_create_profile(principal, users)


def get_current_admin(current_user: dict = Depends(get_current_user)):
    """
    Dependency to allow access only to admin users.
    Uses get_current_user to authenticate, then checks the role.
    """
    if current_user.get('role') != 'admin':
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user
