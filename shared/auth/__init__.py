"""
Authentication Module
=====================

JWT-based authentication and authorization for assurance services.

Features:
- JWT token generation and validation
- Role-based access control
- FastAPI dependencies for route protection

Usage:
    from shared.auth import create_access_token, require_admin

    token = create_access_token({"sub": user_id, "roles": ["admin"]})

    @router.post("/assessment")
    async def submit(user: User = Depends(require_admin)):
        ...
"""

from shared.auth.dependencies import (
    User,
    get_current_active_user,
    get_current_user,
    oauth2_scheme,
    require_admin,
    require_roles,
)
from shared.auth.jwt import (
    TokenData,
    create_access_token,
    decode_token,
)

__all__ = [
    # JWT
    "create_access_token",
    "decode_token",
    "TokenData",
    # Dependencies
    "User",
    "get_current_user",
    "get_current_active_user",
    "require_roles",
    "require_admin",
    "oauth2_scheme",
]
