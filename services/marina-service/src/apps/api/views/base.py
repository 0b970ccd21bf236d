# services/marina-service/src/apps/api/views/base.py
"""
View helpers shared by the marina API views.
"""

from typing import Optional

from shared.common.exceptions import ServiceErrorException
from shared.common.permissions import Roles


def current_user_id(request) -> Optional[int]:
    """Numeric id of the authenticated user, None for anonymous requests."""
    return getattr(request.user, 'user_id', None)


def is_admin(request) -> bool:
    has_any_role = getattr(request.user, 'has_any_role', None)
    return bool(has_any_role and has_any_role(Roles.ADMINS))


def service_error(error) -> ServiceErrorException:
    """API exception for a service-layer error; raise the result."""
    return ServiceErrorException.from_error(error)
