import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from jose import jwt as jose_jwt

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, SECRET_KEY
from .domain.policy import Principal
from .models import Role
from .shared.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: str, role: Role | str, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed access token for a user

    Args:
        user_id: Subject of the token
        role: Role claim (CLIENT, EMPLOYEE or ADMIN)
        expires_delta: Token lifetime (default ACCESS_TOKEN_EXPIRE_MINUTES)
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    role_claim = role.value if isinstance(role, Role) else str(role)
    to_encode = {"sub": user_id, "role": role_claim, "exp": expire}
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_access_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode an access token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """Resolve the (user id, role) pair behind the request's bearer token"""
    if not credentials:
        raise AuthenticationError(
            "Not authenticated. Please provide a valid Bearer token in the Authorization header."
        )

    payload = verify_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        logger.error(f"❌ Token missing subject claim. Available claims: {list(payload.keys())}")
        raise AuthenticationError("Invalid token claims")

    role = Role.parse(payload.get("role"))
    if role is None:
        # Unknown roles are carried through; every policy decision denies them
        logger.warning(f"⚠️ Token for user {user_id} carries unknown role {payload.get('role')!r}")

    return Principal(user_id=user_id, role=role)
