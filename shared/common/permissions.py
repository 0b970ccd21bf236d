# shared/common/permissions.py
"""
Role-Based Access Control

Roles come from the ``roles`` claim of the access token. Ownership checks
compare the token subject with the ``owner_id`` of a club or the
``vessel_owner_id`` of a booking.
"""

from typing import List
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView


class Roles:
    SUPER_ADMIN = 'super_admin'
    ADMIN = 'admin'
    CLUB_OWNER = 'club_owner'
    VESSEL_OWNER = 'vessel_owner'
    GUEST = 'guest'

    ADMINS = [SUPER_ADMIN, ADMIN]


class BasePermission(permissions.BasePermission):
    """Shared role and ownership helpers."""

    def get_user_roles(self, request: Request) -> List[str]:
        return list(getattr(request.user, 'roles', None) or [])

    def is_authenticated(self, request: Request) -> bool:
        return bool(request.user and getattr(request.user, 'is_authenticated', False))

    def is_admin(self, request: Request) -> bool:
        return any(role in Roles.ADMINS for role in self.get_user_roles(request))

    def is_user(self, request: Request, user_id) -> bool:
        current = getattr(request.user, 'user_id', None)
        return user_id is not None and current is not None and current == user_id


class IsAuthenticated(BasePermission):

    def has_permission(self, request: Request, view: APIView) -> bool:
        return self.is_authenticated(request)


class HasRole(BasePermission):
    """Grants access when the user holds any of ``required_roles``."""

    required_roles: List[str] = []

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not self.is_authenticated(request):
            return False
        return any(role in self.required_roles for role in self.get_user_roles(request))



class IsVesselOwner(HasRole):
    """Vessel owners (and admins acting for them)"""
    required_roles = [Roles.VESSEL_OWNER] + Roles.ADMINS


def club_owner_id(obj):
    """Owner id of the club an object belongs to."""
    if hasattr(obj, 'owner_id'):
        return obj.owner_id
    if hasattr(obj, 'club'):
        return obj.club.owner_id
    if hasattr(obj, 'booking'):
        return obj.booking.club.owner_id
    return None


class IsClubManager(HasRole):
    """
    Club owners and admins.

    At object level a club owner may only touch objects of their own club.
    """

    required_roles = [Roles.CLUB_OWNER] + Roles.ADMINS

    def has_object_permission(self, request: Request, view: APIView, obj) -> bool:
        if self.is_admin(request):
            return True
        return self.is_user(request, club_owner_id(obj))


class IsClubManagerOrReadOnly(IsClubManager):
    """
    Read access for any authenticated user, writes for club managers.
    """

    def has_permission(self, request: Request, view: APIView) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return self.is_authenticated(request)
        return super().has_permission(request, view)

    def has_object_permission(self, request: Request, view: APIView, obj) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True
        return super().has_object_permission(request, view, obj)


class IsBookingParticipant(BasePermission):
    """
    The vessel owner of a booking, the owner of its club, or an admin.
    Works for bookings and for payments (through their booking).
    """

    def has_permission(self, request: Request, view: APIView) -> bool:
        return self.is_authenticated(request)

    def has_object_permission(self, request: Request, view: APIView, obj) -> bool:
        if self.is_admin(request):
            return True
        booking = getattr(obj, 'booking', obj)
        return (
            self.is_user(request, booking.vessel_owner_id) or
            self.is_user(request, booking.club.owner_id)
        )
