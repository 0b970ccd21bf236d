# services/marina-service/src/apps/api/serializers/rule_serializers.py
"""
Booking Rule Serializers
"""

from rest_framework import serializers

from apps.core.models import BookingRule, Club, Tariff


class BookingRuleSerializer(serializers.ModelSerializer):
    """Booking rule serializer."""

    rule_type_display = serializers.CharField(
        source='get_rule_type_display',
        read_only=True
    )
    applies_to_all_tariffs = serializers.SerializerMethodField()

    class Meta:
        model = BookingRule
        fields = [
            'id', 'club', 'tariff',
            'rule_type', 'rule_type_display',
            'description', 'parameters',
            'applies_to_all_tariffs',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_applies_to_all_tariffs(self, obj) -> bool:
        return obj.tariff_id is None


class BookingRuleCreateSerializer(serializers.Serializer):
    """
    Input for creating a rule.

    Parameter shapes are checked by the rule service so that malformed
    parameters surface as a rule configuration error.
    """

    club = serializers.PrimaryKeyRelatedField(queryset=Club.objects.all())
    tariff = serializers.PrimaryKeyRelatedField(
        queryset=Tariff.objects.all(),
        required=False,
        allow_null=True
    )
    rule_type = serializers.ChoiceField(choices=BookingRule.RuleType.choices)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    parameters = serializers.JSONField(required=False, allow_null=True)


class BookingRuleUpdateSerializer(serializers.Serializer):
    """Input for updating a rule."""

    tariff = serializers.PrimaryKeyRelatedField(
        queryset=Tariff.objects.all(),
        required=False,
        allow_null=True
    )
    rule_type = serializers.ChoiceField(
        choices=BookingRule.RuleType.choices,
        required=False
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    parameters = serializers.JSONField(required=False, allow_null=True)
