# apps/shipping/serializers.py

from rest_framework import serializers


class ShippingItemSerializer(serializers.Serializer):
    """One package; weight in kg, dimensions in cm, value in reais."""

    weight = serializers.FloatField(min_value=0)
    length = serializers.FloatField(min_value=0)
    width = serializers.FloatField(min_value=0)
    height = serializers.FloatField(min_value=0)
    value = serializers.FloatField(min_value=0, required=False, default=0)


class ShippingCalculationSerializer(serializers.Serializer):
    """
    Quote request from the checkout page.

    Fields are optional here so that missing data is answered with the
    message the checkout page expects.
    """

    origin_zip_code = serializers.CharField(
        required=False, allow_blank=True, max_length=20
    )
    destination_zip_code = serializers.CharField(
        required=False, allow_blank=True, max_length=20
    )
    items = ShippingItemSerializer(many=True, required=False)

    def has_required_data(self) -> bool:
        data = self.validated_data
        return bool(
            data.get("origin_zip_code")
            and data.get("destination_zip_code")
            and data.get("items")
        )


class ShippingOptionSerializer(serializers.Serializer):
    method = serializers.CharField()
    name = serializers.CharField()
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, coerce_to_string=False
    )
    delivery_time_days = serializers.IntegerField()
    delivery_time_description = serializers.CharField()
    carrier = serializers.CharField()


class ShippingCalculationResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    options = ShippingOptionSerializer(many=True)
    error = serializers.CharField(required=False)
