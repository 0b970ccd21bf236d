# services/marina-service/src/apps/api/views/booking_views.py
"""
Booking API Views

Views for booking management and price quotes.
"""

import logging

from django.db.models import Q
from rest_framework import viewsets, status, filters, mixins
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import Booking
from apps.core.services import (
    BookingService,
    MarinaServiceError,
    PaymentService,
    PricingService,
)
from apps.api.serializers import (
    BookingSerializer,
    BookingListSerializer,
    BookingCreateSerializer,
    BookingCancelSerializer,
    PaymentScheduleSerializer,
    PriceQuoteSerializer,
    QuoteRequestSerializer,
)
from shared.common.permissions import (
    IsAuthenticated,
    IsBookingParticipant,
    IsClubManager,
    IsVesselOwner,
)
from .base import current_user_id, is_admin, service_error
from .filters import BookingFilter
from .pagination import StandardResultsSetPagination

logger = logging.getLogger(__name__)


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for booking management.

    Bookings are created PENDING and move on through payments
    (confirmation) or the explicit actions below; they are never edited
    or deleted directly.
    """

    queryset = Booking.objects.select_related('club', 'berth', 'tariff')
    serializer_class = BookingSerializer
    permission_classes = [IsBookingParticipant]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = BookingFilter
    search_fields = ['notes', 'berth__number']
    ordering_fields = ['start_date', 'end_date', 'created_at', 'status', 'total_price']
    ordering = ['-created_at']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()
        self.payment_service = PaymentService()

    def get_queryset(self):
        """Admins see every booking; others their own and their clubs'."""
        queryset = super().get_queryset()
        if is_admin(self.request):
            return queryset
        user_id = current_user_id(self.request)
        return queryset.filter(Q(vessel_owner_id=user_id) | Q(club__owner_id=user_id))

    def get_permissions(self):
        if self.action == 'create':
            return [IsVesselOwner()]
        if self.action in ['activate', 'complete']:
            return [IsClubManager()]
        return super().get_permissions()

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'list':
            return BookingListSerializer
        elif self.action == 'create':
            return BookingCreateSerializer
        elif self.action == 'cancel':
            return BookingCancelSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):
        """Create a new booking for the requesting vessel owner."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        user_id = current_user_id(request)
        vessel_owner_id = data.pop('vessel_owner_id', None)
        if vessel_owner_id is None:
            vessel_owner_id = user_id
        elif vessel_owner_id != user_id and not is_admin(request):
            logger.warning(
                f"User {user_id} tried to book for vessel owner {vessel_owner_id}"
            )
            raise PermissionDenied("Cannot book on behalf of another vessel owner")

        try:
            booking = self.booking_service.create_booking(
                vessel_owner_id=vessel_owner_id,
                **data
            )
        except MarinaServiceError as e:
            raise service_error(e)

        return Response(
            BookingSerializer(booking).data,
            status=status.HTTP_201_CREATED
        )

    # ==========================================================================
    # Lifecycle actions
    # ==========================================================================

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel a live booking."""
        booking = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            booking = self.booking_service.cancel_booking(
                booking.id,
                cancelled_by_id=current_user_id(request),
                reason=serializer.validated_data.get('reason'),
            )
        except MarinaServiceError as e:
            raise service_error(e)

        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=['post'])
    def activate(self, request, pk=None):
        """Mark a confirmed booking as started."""
        booking = self.get_object()
        try:
            booking = self.booking_service.activate_booking(booking.id)
        except MarinaServiceError as e:
            raise service_error(e)
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """Mark an active booking as finished."""
        booking = self.get_object()
        try:
            booking = self.booking_service.complete_booking(booking.id)
        except MarinaServiceError as e:
            raise service_error(e)
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=['get'])
    def payments(self, request, pk=None):
        """Payment schedule of the booking, with penalties as of today."""
        booking = self.get_object()
        schedule = self.payment_service.get_payment_schedule(booking)
        return Response(PaymentScheduleSerializer(schedule).data)


class QuoteView(APIView):
    """
    Price a prospective booking without creating it.

    A monthly tariff with no chargeable months is returned with
    ``priceable`` false rather than as an error.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = QuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            quote = PricingService().quote(**serializer.validated_data)
        except MarinaServiceError as e:
            raise service_error(e)

        return Response(PriceQuoteSerializer(quote).data)
