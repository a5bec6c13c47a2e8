"""
Capability checks.

A single `can(actor, action, resource)` decides who may touch what, so routes
and services never spell out role comparisons themselves.

Ownership is "the resource's `user_id` is the actor's id". Staff (admins and
moderators) may update or delete anything that has an owner.
"""
from enum import Enum
from typing import Any, Optional

from bloxmarket.core.constants import STAFF_ROLES, UserRole
from bloxmarket.core.exceptions import InvalidInputError, PermissionDeniedError


class Action(str, Enum):
    UPDATE = "update"
    DELETE = "delete"
    VOTE = "vote"
    VIEW_DOCUMENT = "view_document"
    REVIEW_APPLICATION = "review_application"
    MODERATE = "moderate"
    MANAGE_USERS = "manage_users"


def _role(actor: Any) -> UserRole:
    return UserRole(actor.role)


def is_staff(actor: Any) -> bool:
    """Admins and moderators."""
    return _role(actor) in STAFF_ROLES


def is_owner(actor: Any, resource: Any, owner_field: str = "user_id") -> bool:
    return resource is not None and getattr(resource, owner_field, None) == actor.id


def can(actor: Any, action: Action, resource: Optional[Any] = None) -> bool:
    """
    Return True if `actor` may perform `action` on `resource`.

    Inactive and banned accounts can do nothing.
    """
    if actor is None or not actor.is_active or _role(actor) == UserRole.BANNED:
        return False

    if action in (Action.UPDATE, Action.DELETE, Action.VIEW_DOCUMENT):
        return is_owner(actor, resource) or is_staff(actor)

    if action == Action.VOTE:
        return not is_owner(actor, resource)

    if action in (Action.REVIEW_APPLICATION, Action.MODERATE):
        return is_staff(actor)

    if action == Action.MANAGE_USERS:
        return _role(actor) == UserRole.ADMIN

    return False


def ensure_can(
    actor: Any,
    action: Action,
    resource: Optional[Any] = None,
    detail: Optional[str] = None,
) -> None:
    """
    Raise if `can()` says no.

    Self-voting is a domain rule rather than an authorization failure, so it
    surfaces as a 400.
    """
    if can(actor, action, resource):
        return

    if action == Action.VOTE and actor is not None and is_owner(actor, resource):
        raise InvalidInputError(detail or "Cannot vote on your own content")

    raise PermissionDeniedError(detail or "Not enough permissions")
