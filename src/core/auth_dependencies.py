"""
FastAPI dependencies for JWT authentication.
Resolves the request's Actor; authorization decisions stay in the services.
"""
import jwt
from fastapi import Header
from typing import Optional
from src.core import config
from src.core.exceptions import UnauthorizedException
from src.models.actor import Actor, Role


def get_current_actor(authorization: Optional[str] = Header(None)) -> Optional[Actor]:
    """
    Decode the bearer token from the Authorization header.

    Args:
        authorization: Authorization header value (Bearer <token>)

    Returns:
        Actor from the token, or None when no header was sent

    Raises:
        UnauthorizedException: If the header is malformed or the token is invalid or expired
    """
    if not authorization:
        return None

    if not authorization.startswith('Bearer '):
        raise UnauthorizedException("Invalid authorization header format")

    token = authorization[7:]

    try:
        payload = jwt.decode(
            token,
            config.settings.jwt_secret,
            algorithms=[config.settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedException("Token has expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedException("Invalid token")

    username = payload.get('sub')
    if not username:
        raise UnauthorizedException("Invalid token payload")

    try:
        role = Role(payload.get('role', Role.USER.value))
    except ValueError:
        raise UnauthorizedException("Invalid token role")

    return Actor(username, role)
