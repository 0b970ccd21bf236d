# services/marina-service/src/apps/api/serializers/payment_serializers.py
"""
Payment Serializers
"""

from rest_framework import serializers

from apps.core.models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    """Payment serializer."""

    status_display = serializers.CharField(
        source='get_status_display',
        read_only=True
    )
    payment_type_display = serializers.CharField(
        source='get_payment_type_display',
        read_only=True
    )
    amount_due = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        read_only=True
    )

    class Meta:
        model = Payment
        fields = [
            'id', 'booking', 'payer_id',
            'amount', 'currency', 'method',
            'payment_type', 'payment_type_display',
            'payment_order', 'payment_month', 'is_required',
            'due_date', 'status', 'status_display',
            'paid_date', 'transaction_id',
            'penalty', 'settled_penalty', 'amount_due',
            'notes', 'version',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class MarkPaidSerializer(serializers.Serializer):
    transaction_id = serializers.CharField(max_length=255, required=False, allow_null=True)
    paid_date = serializers.DateField(required=False, allow_null=True)
    method = serializers.ChoiceField(
        choices=Payment.Method.choices,
        required=False,
        allow_null=True
    )


class RefundSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PaymentScheduleSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    payments = PaymentSerializer(many=True)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    remaining_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_penalty = serializers.DecimalField(max_digits=12, decimal_places=2)
    next_payment_due = PaymentSerializer(allow_null=True)
