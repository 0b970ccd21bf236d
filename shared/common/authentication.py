# shared/common/authentication.py
"""
JWT Authentication

Marina requests carry a bearer token issued by the user service. The
service never issues production tokens itself; ``generate_access_token``
exists for local tooling and the test suite.
"""

import jwt
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Tuple
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ['exp', 'iat', 'sub', 'iss']


def _jwt_setting(name: str):
    return settings.JWT_SETTINGS[name]


class JWTAuthentication(authentication.BaseAuthentication):
    """Authenticates ``Authorization: Bearer <token>`` headers."""

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple[Any, Dict]]:
        header = authentication.get_authorization_header(request)
        if not header:
            return None

        try:
            scheme, _, token = header.decode('utf-8').partition(' ')
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

        if scheme.lower() != self.keyword.lower():
            return None

        token = token.strip()
        if not token or ' ' in token:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        return self.authenticate_token(token)

    def authenticate_token(self, token: str) -> Tuple['TokenUser', Dict]:
        try:
            claims = jwt.decode(
                token,
                _jwt_setting('VERIFYING_KEY'),
                algorithms=[_jwt_setting('ALGORITHM')],
                issuer=_jwt_setting('ISSUER'),
                options={'require': REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

        return TokenUser(claims), claims

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class TokenUser:
    """
    Request user built from token claims.

    ``id`` keeps the raw ``sub`` claim; ``user_id`` is its integer form, or
    None when the subject is not numeric.
    """

    is_active = True
    is_authenticated = True
    is_anonymous = False

    def __init__(self, claims: Dict):
        self.payload = claims
        self.id = claims.get('sub')
        self.email = claims.get('email')

        roles = claims.get('roles') or []
        self.roles = [roles] if isinstance(roles, str) else list(roles)

    def __str__(self) -> str:
        return f"TokenUser({self.id})"

    @property
    def user_id(self) -> Optional[int]:
        try:
            return int(self.id)
        except (TypeError, ValueError):
            return None

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_role(self, roles: List[str]) -> bool:
        return any(role in self.roles for role in roles)


def generate_access_token(user_id, roles: List[str], email: str = None) -> str:
    issued_at = datetime.now(timezone.utc)

    return jwt.encode(
        {
            'sub': str(user_id),
            'email': email,
            'roles': roles,
            'iat': issued_at,
            'exp': issued_at + _jwt_setting('ACCESS_TOKEN_LIFETIME'),
            'iss': _jwt_setting('ISSUER'),
            'type': 'access',
        },
        _jwt_setting('SIGNING_KEY'),
        algorithm=_jwt_setting('ALGORITHM')
    )
