# services/marina-service/src/apps/core/events.py
"""
Marina Service Events

Event definitions and publishing for the marina service.
Events are dispatched after the surrounding transaction commits.
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from django.conf import settings
from django.db import transaction
from django_redis import get_redis_connection

logger = logging.getLogger(__name__)


class EventType:
    """Event type constants for marina service."""

    # Booking lifecycle events
    BOOKING_CREATED = 'booking.created'
    BOOKING_CONFIRMED = 'booking.confirmed'
    BOOKING_ACTIVATED = 'booking.activated'
    BOOKING_COMPLETED = 'booking.completed'
    BOOKING_CANCELLED = 'booking.cancelled'

    # Payment events
    PAYMENT_OVERDUE = 'payment.overdue'
    PAYMENT_PAID = 'payment.paid'
    PAYMENT_REFUNDED = 'payment.refunded'


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for event payloads."""

    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class EventPublisher:
    """
    Event publisher for marina service.

    Backends (``EVENT_BACKEND``): ``log`` writes the event to the log,
    ``redis`` publishes it on the ``MARINA_EVENT_CHANNEL`` pub/sub channel.
    """

    def __init__(self):
        self.service_name = getattr(settings, 'SERVICE_NAME', 'marina-service')
        self.enabled = getattr(settings, 'EVENT_PUBLISHING_ENABLED', True)

    def publish(self, event_type: str, payload: Dict[str, Any], correlation_id: str = None) -> bool:
        """
        Publish an event.

        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.debug(f"Event publishing disabled, skipping: {event_type}")
            return False

        event = {
            'event_type': event_type,
            'service': self.service_name,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'correlation_id': correlation_id,
            'payload': payload,
        }

        try:
            event_json = json.dumps(event, cls=JSONEncoder)

            logger.info(f"Publishing event: {event_type}", extra={
                'event_type': event_type,
            })

            self._publish_to_backend(event_type, event_json)
            return True

        except Exception as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return False

    def _publish_to_backend(self, event_type: str, event_json: str):
        backend = getattr(settings, 'EVENT_BACKEND', 'log')

        if backend == 'redis':
            channel = getattr(settings, 'MARINA_EVENT_CHANNEL', 'marina.events')
            get_redis_connection('default').publish(channel, event_json)
        else:
            logger.debug(f"Event payload: {event_json[:500]}")


event_publisher = EventPublisher()


def publish_on_commit(event_type: str, payload: Dict[str, Any]):
    """Publish once the current transaction commits (immediately outside one)."""
    transaction.on_commit(lambda: event_publisher.publish(event_type, payload))


# =============================================================================
# Convenience functions
# =============================================================================

def booking_payload(booking) -> Dict[str, Any]:
    return {
        'booking_id': booking.id,
        'club_id': booking.club_id,
        'berth_id': booking.berth_id,
        'vessel_id': booking.vessel_id,
        'vessel_owner_id': booking.vessel_owner_id,
        'tariff_id': booking.tariff_id,
        'status': booking.status,
        'total_price': booking.total_price,
        'start_date': booking.start_date,
        'end_date': booking.end_date,
    }


def payment_payload(payment) -> Dict[str, Any]:
    return {
        'payment_id': payment.id,
        'booking_id': payment.booking_id,
        'payer_id': payment.payer_id,
        'amount': payment.amount,
        'currency': payment.currency,
        'status': payment.status,
        'due_date': payment.due_date,
        'penalty': payment.penalty,
        'settled_penalty': payment.settled_penalty,
        'transaction_id': payment.transaction_id,
    }


def publish_booking_event(event_type: str, booking):
    publish_on_commit(event_type, booking_payload(booking))


def publish_payment_event(event_type: str, payment):
    publish_on_commit(event_type, payment_payload(payment))
