# services/marina-service/src/apps/api/views/club_views.py
"""
Club and Berth API Views

Read access to clubs and berths plus the availability checks.
"""

import logging

from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import Berth, Club
from apps.core.services import AvailabilityService
from apps.api.serializers import (
    BerthAvailabilitySerializer,
    BerthSerializer,
    ClubSerializer,
)
from shared.common.permissions import IsAuthenticated
from .filters import BerthFilter
from .pagination import StandardResultsSetPagination

logger = logging.getLogger(__name__)


class ClubViewSet(viewsets.ReadOnlyModelViewSet):
    """Clubs are managed elsewhere; this service only reads them."""

    queryset = Club.objects.filter(is_active=True)
    serializer_class = ClubSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = StandardResultsSetPagination
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'address']
    ordering = ['name']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    @action(detail=True, methods=['get'])
    def availability(self, request, pk=None):
        """Availability of every berth of the club."""
        club = self.get_object()
        results = self.availability_service.get_club_availability(club)
        return Response({
            'club_id': club.id,
            'berths': BerthAvailabilitySerializer(results, many=True).data,
        })


class BerthViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Berths with their tariff links.

    Filter by ``vessel_length``/``vessel_width`` to find berths a vessel fits.
    """

    queryset = Berth.objects.select_related('club').prefetch_related('tariff_berths').distinct()
    serializer_class = BerthSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = BerthFilter
    ordering_fields = ['number', 'length', 'width', 'price_per_day']
    ordering = ['club_id', 'number']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    @action(detail=True, methods=['get'])
    def availability(self, request, pk=None):
        """Whether the berth can be booked right now."""
        berth = self.get_object()
        result = self.availability_service.check_berth(berth)
        return Response(BerthAvailabilitySerializer(result).data)
