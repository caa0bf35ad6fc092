"""
Authentication service for user login and JWT token management.
"""
import jwt
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional
from src.core import config
from src.models.actor import Role
from src.repositories.user_repository import UserRepository


def create_access_token(username: str, role: Role = Role.USER) -> str:
    """
    Generate a JWT access token for an authenticated user.

    Args:
        username: The username to encode in the token
        role: Role claim checked by the authorization gate

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)

    payload = {
        "sub": username,
        "role": Role(role).value,
        "exp": now + timedelta(hours=config.settings.jwt_expiration_hours),
        "iat": now
    }

    return jwt.encode(payload, config.settings.jwt_secret, algorithm=config.settings.jwt_algorithm)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a bcrypt hashed password.

    Returns:
        True if password matches, False otherwise
    """
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def hash_password(plain_password: str) -> str:
    """Hash a password for storage in the users table."""
    return bcrypt.hashpw(plain_password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def authenticate_user(username: str, password: str, user_repository: UserRepository = None) -> Optional[dict]:
    """
    Authenticate user by verifying credentials against the users table.

    Returns:
        User item if authentication successful, None otherwise
    """
    user_repository = user_repository or UserRepository()
    user = user_repository.get_by_username(username)

    if not user or 'password_hash' not in user:
        return None

    if not verify_password(password, user['password_hash']):
        return None

    return user
