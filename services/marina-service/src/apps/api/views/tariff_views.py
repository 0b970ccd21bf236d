# services/marina-service/src/apps/api/views/tariff_views.py
"""
Tariff API Views
"""

import logging

from rest_framework import viewsets, status, filters
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import Tariff
from apps.core.services import MarinaServiceError, TariffService
from apps.api.serializers import (
    TariffSerializer,
    TariffCreateSerializer,
    TariffUpdateSerializer,
)
from shared.common.permissions import IsClubManagerOrReadOnly
from .base import service_error
from .filters import TariffFilter
from .pagination import StandardResultsSetPagination

logger = logging.getLogger(__name__)


class TariffViewSet(viewsets.ModelViewSet):
    """
    ViewSet for club tariffs and their berth links.
    """

    queryset = Tariff.objects.select_related('club').prefetch_related('tariff_berths').distinct()
    serializer_class = TariffSerializer
    permission_classes = [IsClubManagerOrReadOnly]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = TariffFilter
    search_fields = ['name']
    ordering_fields = ['season', 'amount', 'name', 'created_at']
    ordering = ['-season', 'name']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.tariff_service = TariffService()

    def get_serializer_class(self):
        if self.action == 'create':
            return TariffCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return TariffUpdateSerializer
        return TariffSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        self.check_object_permissions(request, data['club'])

        try:
            tariff = self.tariff_service.create_tariff(**data)
        except MarinaServiceError as e:
            raise service_error(e)

        return Response(
            TariffSerializer(tariff).data,
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        tariff = self.get_object()

        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            tariff = self.tariff_service.update_tariff(tariff.id, **serializer.validated_data)
        except MarinaServiceError as e:
            raise service_error(e)

        return Response(TariffSerializer(tariff).data)

    def destroy(self, request, *args, **kwargs):
        tariff = self.get_object()
        try:
            self.tariff_service.delete_tariff(tariff.id)
        except MarinaServiceError as e:
            raise service_error(e)
        return Response(status=status.HTTP_204_NO_CONTENT)
