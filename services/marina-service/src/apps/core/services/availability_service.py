# services/marina-service/src/apps/core/services/availability_service.py
"""
Availability Service

Decides whether a berth can take a new booking.
"""

import logging
from typing import Any, Dict, Iterable, List

from apps.core.models import Berth, Booking, Club
from ..exceptions import BerthNotFoundError

logger = logging.getLogger(__name__)


STATUS_AVAILABLE = 'available'
STATUS_PENDING = 'pending'
STATUS_BOOKED = 'booked'
STATUS_UNAVAILABLE = 'unavailable'


def is_bookable(berth: Berth, live_bookings: Iterable[Booking]) -> bool:
    """
    A berth is bookable iff it is administratively available and none of
    ``live_bookings`` is a pending, confirmed or active booking of it.
    """
    if not berth.is_available:
        return False
    return not any(
        b.berth_id == berth.id and b.is_live
        for b in live_bookings
    )


def berth_status(berth: Berth, live_bookings: Iterable[Booking]) -> str:
    """Display status for a berth."""
    if not berth.is_available:
        return STATUS_UNAVAILABLE

    statuses = [b.status for b in live_bookings if b.berth_id == berth.id and b.is_live]
    if Booking.Status.CONFIRMED in statuses or Booking.Status.ACTIVE in statuses:
        return STATUS_BOOKED
    if Booking.Status.PENDING in statuses:
        return STATUS_PENDING
    return STATUS_AVAILABLE


class AvailabilityService:
    """
    Service for berth availability.

    The boolean check here is advisory for the booking flow: the live
    booking constraint on the bookings table is what serializes writers.
    """

    def get_berth(self, berth_id: int) -> Berth:
        try:
            return Berth.objects.select_related('club').get(id=berth_id)
        except Berth.DoesNotExist:
            raise BerthNotFoundError(f"Berth {berth_id} not found")

    def get_live_bookings(self, berth: Berth) -> List[Booking]:
        """Live bookings of one berth, read at call time."""
        return list(
            Booking.objects.filter(
                berth_id=berth.id,
                status__in=Booking.get_live_statuses(),
            )
        )

    def check_berth(self, berth: Berth) -> Dict[str, Any]:
        """
        Check one berth.

        Returns:
            Dict with berth_id, bookable, status and the live booking ids
        """
        live = self.get_live_bookings(berth)
        return {
            'berth_id': berth.id,
            'bookable': is_bookable(berth, live),
            'status': berth_status(berth, live),
            'live_booking_ids': [b.id for b in live],
        }

    def get_club_availability(self, club: Club) -> List[Dict[str, Any]]:
        """Availability of every berth of a club, with one query for bookings."""
        berths = list(Berth.objects.filter(club_id=club.id).order_by('number'))

        live_by_berth: Dict[int, List[Booking]] = {}
        live = Booking.objects.filter(
            club_id=club.id,
            status__in=Booking.get_live_statuses(),
        )
        for booking in live:
            live_by_berth.setdefault(booking.berth_id, []).append(booking)

        results = []
        for berth in berths:
            berth_live = live_by_berth.get(berth.id, [])
            results.append({
                'berth_id': berth.id,
                'number': berth.number,
                'bookable': is_bookable(berth, berth_live),
                'status': berth_status(berth, berth_live),
                'live_booking_ids': [b.id for b in berth_live],
            })
        return results
