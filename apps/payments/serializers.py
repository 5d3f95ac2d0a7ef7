# apps/payments/serializers.py

from rest_framework import serializers


class PaymentSubmissionSerializer(serializers.Serializer):
    """
    Body posted by the checkout payment widget.

    Every field is optional here; missing values are reported by the
    payment processor with the messages the checkout page expects.
    """

    formData = serializers.JSONField(required=False, default=dict)
    additionalData = serializers.JSONField(required=False, default=dict)
    preferenceId = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=100
    )
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True,
        help_text="Amount in cents",
    )


class PointOfInteractionSerializer(serializers.Serializer):
    type = serializers.CharField(allow_null=True)
    transaction_data = serializers.DictField(allow_null=True)


class PaymentResultSerializer(serializers.Serializer):
    id = serializers.CharField()
    status = serializers.CharField()
    status_detail = serializers.CharField(allow_null=True)
    payment_method_id = serializers.CharField(allow_null=True)
    external_reference = serializers.CharField(allow_null=True)
    transaction_amount = serializers.FloatField(allow_null=True)
    point_of_interaction = PointOfInteractionSerializer(required=False)


class PaymentResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    payment = PaymentResultSerializer(required=False)
    error = serializers.CharField(required=False)
