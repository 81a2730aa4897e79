"""
Password hashing and bearer-token authentication.

Tokens are opaque random strings handed to the client once; only their SHA-256
digest is stored, together with an expiry.
"""
import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from . import config, models
from .database import get_db
from .errors import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash the provided password using bcrypt."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def check_password(stored_hash: str, provided_password: str) -> bool:
    """Validate a plaintext password against the stored hash."""
    try:
        return bcrypt.checkpw(provided_password.encode("utf-8"), stored_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def issue_token(db: Session, user: models.User) -> str:
    """Create a new bearer token for `user`. Returns the plain token."""
    token = secrets.token_urlsafe(TOKEN_BYTES)
    db.add(models.AuthToken(
        user_id=user.id,
        token_hash=_digest(token),
        expires_at=models.utcnow() + timedelta(hours=config.TOKEN_TTL_HOURS),
    ))
    db.commit()
    return token


def resolve_token(db: Session, token: str) -> models.User:
    row = db.query(models.AuthToken).filter(models.AuthToken.token_hash == _digest(token)).first()
    if row is None:
        raise AuthenticationError("Invalid token. Please log in again.")
    if row.expires_at <= models.utcnow():
        db.delete(row)
        db.commit()
        raise AuthenticationError("Token expired. Please log in again.")
    if row.user is None:
        raise AuthenticationError("User not found or invalid token.")
    return row.user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> models.User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required. No token provided.")
    return resolve_token(db, credentials.credentials)


def require_roles(*roles: str):
    """Dependency factory restricting a route to the given user roles."""
    def checker(user: models.User = Depends(get_current_user)) -> models.User:
        if user.role not in roles:
            logger.warning("User %s with role %s denied; needs one of %s", user.id, user.role, roles)
            raise AuthorizationError(f"Access denied. {user.role} role is not authorized.")
        return user
    return checker
