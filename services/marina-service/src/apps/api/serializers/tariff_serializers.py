# services/marina-service/src/apps/api/serializers/tariff_serializers.py
"""
Tariff, Club and Berth Serializers
"""

from decimal import Decimal

from rest_framework import serializers

from apps.core.models import Berth, Club, Tariff


class ClubSerializer(serializers.ModelSerializer):
    class Meta:
        model = Club
        fields = [
            'id', 'name', 'description', 'address', 'owner_id',
            'season', 'rental_months',
            'min_rental_period', 'max_rental_period',
            'base_price', 'min_price_per_month',
            'is_active',
        ]
        read_only_fields = fields


class BerthSerializer(serializers.ModelSerializer):
    tariff_ids = serializers.SerializerMethodField()

    class Meta:
        model = Berth
        fields = [
            'id', 'club', 'number', 'length', 'width',
            'price_per_day', 'is_available', 'notes',
            'tariff_ids',
        ]
        read_only_fields = fields

    def get_tariff_ids(self, obj) -> list:
        return sorted(tb.tariff_id for tb in obj.tariff_berths.all())


class BerthAvailabilitySerializer(serializers.Serializer):
    berth_id = serializers.IntegerField()
    number = serializers.CharField(required=False)
    bookable = serializers.BooleanField()
    status = serializers.CharField()
    live_booking_ids = serializers.ListField(child=serializers.IntegerField())


class TariffSerializer(serializers.ModelSerializer):
    """Tariff serializer."""

    tariff_type_display = serializers.CharField(
        source='get_tariff_type_display',
        read_only=True
    )
    berth_ids = serializers.SerializerMethodField()

    class Meta:
        model = Tariff
        fields = [
            'id', 'club', 'name',
            'tariff_type', 'tariff_type_display',
            'amount', 'season', 'months', 'monthly_amounts',
            'berth_ids',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_berth_ids(self, obj) -> list:
        return sorted(tb.berth_id for tb in obj.tariff_berths.all())


class TariffCreateSerializer(serializers.Serializer):
    club = serializers.PrimaryKeyRelatedField(queryset=Club.objects.all())
    name = serializers.CharField(max_length=255)
    tariff_type = serializers.ChoiceField(choices=Tariff.TariffType.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    season = serializers.IntegerField(min_value=2000, max_value=2100)
    months = serializers.ListField(
        child=serializers.IntegerField(min_value=1, max_value=12),
        required=False,
        allow_empty=True
    )
    monthly_amounts = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0')),
        required=False,
        allow_null=True
    )
    berth_ids = serializers.ListField(
        child=serializers.IntegerField(),
        required=False
    )

    def validate_monthly_amounts(self, value):
        if value is None:
            return None
        for month in value:
            if not str(month).isdigit() or not 1 <= int(month) <= 12:
                raise serializers.ValidationError(f"Invalid month: {month}")
        return {str(int(month)): str(amount) for month, amount in value.items()}


class TariffUpdateSerializer(TariffCreateSerializer):
    club = None
    name = serializers.CharField(max_length=255, required=False)
    tariff_type = serializers.ChoiceField(choices=Tariff.TariffType.choices, required=False)
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False
    )
    season = serializers.IntegerField(min_value=2000, max_value=2100, required=False)
