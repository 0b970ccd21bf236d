# services/marina-service/src/apps/api/views/filters.py
"""
API Filters

Django Filter classes for the marina API.
"""

import django_filters

from apps.core.models import Berth, Booking, BookingRule, Payment, Tariff


class BerthFilter(django_filters.FilterSet):
    """Berth filter; vessel dimensions select berths large enough for it."""

    club = django_filters.NumberFilter(field_name='club_id')
    vessel_length = django_filters.NumberFilter(
        field_name='length',
        lookup_expr='gte'
    )
    vessel_width = django_filters.NumberFilter(
        field_name='width',
        lookup_expr='gte'
    )
    tariff = django_filters.NumberFilter(field_name='tariff_berths__tariff_id')

    class Meta:
        model = Berth
        fields = ['club', 'is_available', 'vessel_length', 'vessel_width', 'tariff']


class TariffFilter(django_filters.FilterSet):
    club = django_filters.NumberFilter(field_name='club_id')
    berth = django_filters.NumberFilter(field_name='tariff_berths__berth_id')

    class Meta:
        model = Tariff
        fields = ['club', 'season', 'tariff_type', 'berth']


class BookingRuleFilter(django_filters.FilterSet):
    club = django_filters.NumberFilter(field_name='club_id')
    tariff = django_filters.NumberFilter(field_name='tariff_id')
    club_wide = django_filters.BooleanFilter(
        field_name='tariff',
        lookup_expr='isnull'
    )

    class Meta:
        model = BookingRule
        fields = ['club', 'tariff', 'rule_type', 'club_wide']


class BookingFilter(django_filters.FilterSet):
    """Filter for booking queries."""

    club = django_filters.NumberFilter(field_name='club_id')
    berth = django_filters.NumberFilter(field_name='berth_id')
    tariff = django_filters.NumberFilter(field_name='tariff_id')
    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    status_in = django_filters.BaseInFilter(field_name='status')
    live = django_filters.BooleanFilter(method='filter_live')
    start_from = django_filters.DateFilter(field_name='start_date', lookup_expr='gte')
    start_to = django_filters.DateFilter(field_name='start_date', lookup_expr='lte')

    class Meta:
        model = Booking
        fields = ['club', 'berth', 'tariff', 'vessel_id', 'vessel_owner_id', 'status']

    def filter_live(self, queryset, name, value):
        if value:
            return queryset.filter(status__in=Booking.get_live_statuses())
        return queryset.exclude(status__in=Booking.get_live_statuses())


class PaymentFilter(django_filters.FilterSet):
    """Filter for payment queries."""

    booking = django_filters.NumberFilter(field_name='booking_id')
    club = django_filters.NumberFilter(field_name='booking__club_id')
    status = django_filters.ChoiceFilter(choices=Payment.Status.choices)
    payment_type = django_filters.ChoiceFilter(choices=Payment.PaymentType.choices)
    due_before = django_filters.DateFilter(field_name='due_date', lookup_expr='lte')
    due_after = django_filters.DateFilter(field_name='due_date', lookup_expr='gte')

    class Meta:
        model = Payment
        fields = ['booking', 'club', 'payer_id', 'status', 'payment_type', 'is_required']
