import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, SECRET_KEY
from .database import get_db
from .models import User
from .shared.errors import AuthenticationError, AuthorizationError
from .shared.permissions import Capability, has_capability

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against stored hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# ACCESS TOKENS
# ============================================================================


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token for a user

    Args:
        user: Authenticated user
        expires_delta: Token lifetime (default ACCESS_TOKEN_EXPIRE_MINUTES)
    """
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": str(user.id), "role": user.role, "exp": expire}
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT access token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def authenticate_user(db: Session, login: str, password: str) -> User:
    """Look up a user by login and check the password"""
    user = db.query(User).filter(User.login == login).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"⚠️ Failed login attempt for '{login}'")
        raise AuthenticationError("Invalid credentials")
    logger.info(f"✅ User {user.id} logged in")
    return user


# ============================================================================
# DEPENDENCIES
# ============================================================================


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from Bearer token"""
    if not credentials:
        raise AuthenticationError(
            "Not authenticated. Please provide a valid Bearer token in the Authorization header."
        )

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Invalid token claims") from e

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        # Account removed after the token was issued
        raise AuthenticationError("Unauthorized")

    logger.debug(f"✅ User authenticated: {user.login} ({user.role})")
    return user


def require_capability(capability: Capability):
    """Dependency factory: authenticated user whose role grants the capability"""

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_capability(current_user.role, capability):
            logger.warning(
                f"⚠️ User {current_user.id} ({current_user.role}) denied capability {capability.value}"
            )
            raise AuthorizationError("Forbidden")
        return current_user

    return dependency
