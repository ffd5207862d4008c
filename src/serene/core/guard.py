"""
Access & entitlement guard.

Every handler that touches personal data or the premium catalog goes through
these predicates, always in the same order:

1. authentication (``require_authenticated``)
2. existence (NotFound)
3. ownership or entitlement (Forbidden / EntitlementRequired)

For every entity a missing row is 404 and a row owned by someone else is 403.
"""
import logging
from datetime import date, datetime, time, timezone
from typing import Callable, Optional, TypeVar

from serene.core.errors import EntitlementRequired, Forbidden, NotFound, Unauthenticated, ValidationFailed
from serene.models import MindfulnessSession, User

logger = logging.getLogger(__name__)

ResourceT = TypeVar("ResourceT")


def owner_id_of(resource) -> int:
    return resource.user_id


def require_authenticated(principal: Optional[User]) -> User:
    if principal is None:
        raise Unauthenticated()
    return principal


def authorize_ownership(
    principal: Optional[User],
    resource: Optional[ResourceT],
    *,
    owner_of: Callable[[ResourceT], int] = owner_id_of,
    resource_name: str = "Resource",
) -> ResourceT:
    """Return ``resource`` if it exists and belongs to ``principal``."""
    principal = require_authenticated(principal)
    if resource is None:
        raise NotFound(f"{resource_name} not found")
    if owner_of(resource) != principal.id:
        logger.warning(f"User {principal.id} denied access to {resource_name.lower()} {getattr(resource, 'id', '?')}")
        raise Forbidden(f"Unauthorized access to {resource_name.lower()}")
    return resource


def authorize_entitlement(
    principal: Optional[User], session: Optional[MindfulnessSession]
) -> MindfulnessSession:
    """Return ``session`` if it exists and the principal may play it."""
    principal = require_authenticated(principal)
    if session is None:
        raise NotFound("Mindfulness session not found")
    if session.is_premium and not principal.is_premium:
        raise EntitlementRequired("Premium subscription required")
    return session


def catalog_scope(principal: Optional[User]) -> bool:
    """Whether catalog listings for ``principal`` may include premium sessions."""
    return bool(require_authenticated(principal).is_premium)


def parse_instant(value: Optional[str], *, name: str, end_of_day: bool = False) -> datetime:
    """
    Parse an ISO-8601 date or date-time query bound into an aware UTC datetime.

    A bare date covers the whole day: it maps to midnight as a start bound and
    to the last microsecond of the day as an end bound. Naive date-times are
    taken as UTC.

    Raises:
        ValidationFailed: If the value is missing or does not parse
    """
    if value is None or not value.strip():
        raise ValidationFailed("Start date and end date are required")
    raw = value.strip()
    try:
        if len(raw) == 10:
            day = date.fromisoformat(raw)
            parsed = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            # fromisoformat only learned the "Z" suffix in 3.11
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00").replace("z", "+00:00"))
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        # offsets near datetime.min/max shift out of range
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        raise ValidationFailed(f"Invalid date format for {name}")


def parse_range(start: Optional[str], end: Optional[str]) -> tuple[datetime, datetime]:
    """Validate both range bounds before any store query runs."""
    if not start or not end:
        raise ValidationFailed("Start date and end date are required")
    return (
        parse_instant(start, name="startDate"),
        parse_instant(end, name="endDate", end_of_day=True),
    )
