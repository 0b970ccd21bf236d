# services/marina-service/src/apps/api/serializers/booking_serializers.py
"""
Booking Serializers

Serializers for bookings and price quotes.
"""

from rest_framework import serializers

from apps.core.models import Berth, Booking, Club, Tariff


class BookingSerializer(serializers.ModelSerializer):
    """Base booking serializer."""

    status_display = serializers.CharField(
        source='get_status_display',
        read_only=True
    )
    duration_days = serializers.IntegerField(read_only=True)
    can_cancel = serializers.BooleanField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'club', 'berth', 'tariff',
            'vessel_id', 'vessel_owner_id',
            'start_date', 'end_date', 'duration_days',
            'status', 'status_display',
            'base_price', 'deposit_amount', 'total_price',
            'price_breakdown', 'applied_rule_ids',
            'auto_renewal', 'notes', 'contract_path',
            'can_cancel',
            'confirmed_at', 'activated_at', 'completed_at',
            'cancelled_at', 'cancelled_by_id', 'cancellation_reason',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class BookingListSerializer(BookingSerializer):
    """Compact serializer for booking lists."""

    class Meta(BookingSerializer.Meta):
        fields = [
            'id', 'club', 'berth', 'tariff', 'vessel_id',
            'start_date', 'end_date',
            'status', 'status_display',
            'total_price', 'can_cancel',
        ]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    """Serializer for creating new bookings."""

    club = serializers.PrimaryKeyRelatedField(queryset=Club.objects.all())
    berth = serializers.PrimaryKeyRelatedField(queryset=Berth.objects.all())
    tariff = serializers.PrimaryKeyRelatedField(
        queryset=Tariff.objects.all(),
        required=False,
        allow_null=True
    )
    vessel_id = serializers.IntegerField()
    vessel_owner_id = serializers.IntegerField(
        required=False,
        help_text="Defaults to the requesting user"
    )
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    auto_renewal = serializers.BooleanField(default=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if attrs['end_date'] < attrs['start_date']:
            raise serializers.ValidationError({
                'end_date': "End date must not be before start date"
            })
        return attrs


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# =============================================================================
# Quotes
# =============================================================================

class QuoteRequestSerializer(serializers.Serializer):
    club = serializers.PrimaryKeyRelatedField(queryset=Club.objects.all())
    berth = serializers.PrimaryKeyRelatedField(queryset=Berth.objects.all())
    tariff = serializers.PrimaryKeyRelatedField(
        queryset=Tariff.objects.all(),
        required=False,
        allow_null=True
    )
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        if ('start_date' in attrs) != ('end_date' in attrs):
            raise serializers.ValidationError(
                "start_date and end_date must be given together"
            )
        return attrs


class LineItemSerializer(serializers.Serializer):
    month = serializers.IntegerField(allow_null=True)
    label = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_type = serializers.CharField()


class PriceQuoteSerializer(serializers.Serializer):
    club_id = serializers.IntegerField()
    berth_id = serializers.IntegerField()
    tariff_id = serializers.IntegerField(allow_null=True)
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    deposit_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    monthly_breakdown = LineItemSerializer(many=True)
    applied_rule_ids = serializers.ListField(child=serializers.IntegerField())
    priceable = serializers.BooleanField()
