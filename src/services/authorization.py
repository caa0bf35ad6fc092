"""
Ownership and role checks shared by every upload operation.
Owners act on their own records; administrators act on any record.
"""
from typing import Optional
from src.core.exceptions import ForbiddenException, UnauthorizedException
from src.models.actor import Actor
from src.models.upload_record import UploadRecord


def require_actor(actor: Optional[Actor]) -> Actor:
    """Raise UnauthorizedException when no identity is present."""
    if actor is None or not actor.id:
        raise UnauthorizedException("Authentication required")
    return actor


def require_admin(actor: Optional[Actor]) -> Actor:
    """Raise UnauthorizedException without identity, ForbiddenException without the admin role."""
    actor = require_actor(actor)
    if not actor.is_admin:
        raise ForbiddenException("Administrator privileges required")
    return actor


def can_access(actor: Actor, record: UploadRecord) -> bool:
    """Whether the actor may see, and therefore delete, the record."""
    return actor.is_admin or record.owner_id == actor.id


def require_owner_scope(actor: Optional[Actor], owner_id: Optional[str]) -> str:
    """
    Resolve which owner's records the actor may list.

    Args:
        actor: Caller
        owner_id: Owner requested by the client, if any

    Returns:
        The owner id to query

    Raises:
        UnauthorizedException: If there is no actor
        ForbiddenException: If a non-admin names another owner
    """
    actor = require_actor(actor)
    if not owner_id or owner_id == actor.id:
        return actor.id
    if not actor.is_admin:
        raise ForbiddenException("Cannot list uploads of another user")
    return owner_id
