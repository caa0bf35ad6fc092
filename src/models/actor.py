"""
Request-scoped identity passed explicitly into every service call.
"""
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Actor:
    """The authenticated caller of an operation."""

    def __init__(self, actor_id: str, role: Role = Role.USER):
        self.id = actor_id
        self.role = Role(role)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __repr__(self):
        return f"Actor(id={self.id}, role={self.role.value})"
