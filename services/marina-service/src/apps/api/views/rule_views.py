# services/marina-service/src/apps/api/views/rule_views.py
"""
Booking Rule API Views

Views for managing the booking rules of a club.
"""

import logging

from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import BookingRule, Club
from apps.core.services import (
    BookingValidationError,
    ClubNotFoundError,
    MarinaServiceError,
    RuleService,
    TariffService,
)
from apps.api.serializers import (
    BookingRuleSerializer,
    BookingRuleCreateSerializer,
    BookingRuleUpdateSerializer,
)
from shared.common.permissions import IsClubManagerOrReadOnly
from .base import service_error
from .filters import BookingRuleFilter
from .pagination import StandardResultsSetPagination

logger = logging.getLogger(__name__)


class BookingRuleViewSet(viewsets.ModelViewSet):
    """
    ViewSet for booking rule management.

    Rules are readable by any authenticated user; club owners manage the
    rules of their own clubs.
    """

    queryset = BookingRule.objects.select_related('club', 'tariff')
    serializer_class = BookingRuleSerializer
    permission_classes = [IsClubManagerOrReadOnly]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = BookingRuleFilter
    search_fields = ['description']
    ordering_fields = ['id', 'rule_type', 'created_at']
    ordering = ['id']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.rule_service = RuleService()

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'create':
            return BookingRuleCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return BookingRuleUpdateSerializer
        return BookingRuleSerializer

    def create(self, request, *args, **kwargs):
        """Create a new booking rule."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        club = serializer.validated_data.pop('club')
        self.check_object_permissions(request, club)

        try:
            rule = self.rule_service.create_rule(club=club, **serializer.validated_data)
        except MarinaServiceError as e:
            raise service_error(e)

        return Response(
            BookingRuleSerializer(rule).data,
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        """Update a rule; parameters are re-validated against its type."""
        partial = kwargs.pop('partial', False)
        rule = self.get_object()

        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            rule = self.rule_service.update_rule(rule.id, **serializer.validated_data)
        except MarinaServiceError as e:
            raise service_error(e)

        return Response(BookingRuleSerializer(rule).data)

    def destroy(self, request, *args, **kwargs):
        rule = self.get_object()
        self.rule_service.delete_rule(rule.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def resolved(self, request):
        """
        Rules in force for a club (and optionally a tariff) after resolution.

        Query params: club (required), tariff (optional).
        """
        club_id = request.query_params.get('club')
        tariff_id = request.query_params.get('tariff')

        try:
            if not club_id:
                raise BookingValidationError("Query parameter 'club' is required")
            club = Club.objects.filter(pk=club_id).first() if club_id.isdigit() else None
            if club is None:
                raise ClubNotFoundError(f"Club {club_id} not found")
            tariff = None
            if tariff_id:
                if not tariff_id.isdigit():
                    raise BookingValidationError("Query parameter 'tariff' must be an id")
                tariff = TariffService().get_tariff(int(tariff_id))
            resolved = self.rule_service.resolve_rules(club, tariff)
        except MarinaServiceError as e:
            raise service_error(e)

        return Response({
            'club_id': club.id,
            'tariff_id': tariff.id if tariff else None,
            'deposit_amount': resolved.deposit_amount,
            'deposit_percentage': getattr(resolved.deposit, 'deposit_percentage', None),
            'required_months': sorted(resolved.required_months) if resolved.required_months is not None else None,
            'min_period': resolved.min_period,
            'max_period': resolved.max_period,
            'custom_rule_count': len(resolved.custom_rules),
            'applied_rule_ids': list(resolved.applied_rule_ids),
        })
