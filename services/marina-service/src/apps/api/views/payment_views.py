# services/marina-service/src/apps/api/views/payment_views.py
"""
Payment API Views

Payment ledger reads and the paid/refund transitions.
"""

import logging

from django.db.models import Q
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import Payment
from apps.core.services import MarinaServiceError, PaymentService
from apps.api.serializers import (
    MarkPaidSerializer,
    PaymentSerializer,
    RefundSerializer,
)
from shared.common.permissions import IsBookingParticipant, IsClubManager
from .base import current_user_id, is_admin, service_error
from .filters import PaymentFilter
from .pagination import StandardResultsSetPagination

logger = logging.getLogger(__name__)


class PaymentViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for payments.

    Overdue status and penalties are brought up to date before every read.
    """

    queryset = Payment.objects.select_related('booking', 'booking__club')
    serializer_class = PaymentSerializer
    permission_classes = [IsBookingParticipant]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = PaymentFilter
    ordering_fields = ['due_date', 'amount', 'payment_order', 'created_at']
    ordering = ['booking_id', 'payment_order']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.payment_service = PaymentService()

    def get_queryset(self):
        queryset = super().get_queryset()
        if is_admin(self.request):
            return queryset
        user_id = current_user_id(self.request)
        return queryset.filter(
            Q(payer_id=user_id) |
            Q(booking__vessel_owner_id=user_id) |
            Q(booking__club__owner_id=user_id)
        )

    def get_permissions(self):
        if self.action in ['mark_paid', 'refund']:
            return [IsClubManager()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == 'mark_paid':
            return MarkPaidSerializer
        elif self.action == 'refund':
            return RefundSerializer
        return PaymentSerializer

    def list(self, request, *args, **kwargs):
        # Refresh before filtering so a status=overdue filter sees fresh rows
        self.payment_service.refresh_overdue_queryset(self.get_queryset())
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        payment = self.get_object()
        payment = self.payment_service.refresh_overdue(payment)
        return Response(PaymentSerializer(payment).data)

    @action(detail=False, methods=['get'])
    def overdue(self, request):
        """Overdue payments visible to the caller."""
        queryset = self.get_queryset()
        self.payment_service.refresh_overdue_queryset(queryset)
        queryset = self.filter_queryset(queryset.filter(status=Payment.Status.OVERDUE))

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(PaymentSerializer(page, many=True).data)
        return Response(PaymentSerializer(queryset, many=True).data)

    @action(detail=True, methods=['post'], url_path='mark-paid')
    def mark_paid(self, request, pk=None):
        """Record the payment as paid; may confirm its booking."""
        payment = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = self.payment_service.mark_paid(
                payment.id,
                **serializer.validated_data
            )
        except MarinaServiceError as e:
            raise service_error(e)

        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=['post'])
    def refund(self, request, pk=None):
        payment = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = self.payment_service.mark_refunded(
                payment.id,
                notes=serializer.validated_data.get('notes'),
            )
        except MarinaServiceError as e:
            raise service_error(e)

        return Response(PaymentSerializer(payment).data)
