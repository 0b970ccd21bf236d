# services/marina-service/src/apps/api/urls.py
"""
Marina API URL Configuration

Defines all API routes for the marina service.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    ClubViewSet,
    BerthViewSet,
    TariffViewSet,
    BookingRuleViewSet,
    BookingViewSet,
    QuoteView,
    PaymentViewSet,
)

app_name = 'api'

router = DefaultRouter()
router.register(r'clubs', ClubViewSet, basename='club')
router.register(r'berths', BerthViewSet, basename='berth')
router.register(r'tariffs', TariffViewSet, basename='tariff')
router.register(r'rules', BookingRuleViewSet, basename='rule')
router.register(r'bookings', BookingViewSet, basename='booking')
router.register(r'payments', PaymentViewSet, basename='payment')

urlpatterns = [
    path('', include(router.urls)),

    # Pricing
    path('quotes/', QuoteView.as_view(), name='quote'),
]
