# apps/accounts/serializers.py

"""
Account serializers for the storefront API.
Handles customer registration, profile updates and saved addresses.
"""

from typing import ClassVar

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from apps.accounts.models import CustomerAddress, User
from apps.core.serializers import BaseModelSerializer, SanitizedCharField
from apps.core.utils import only_digits


def normalize_cpf_cnpj(value, instance=None):
    """
    Strip formatting from a CPF/CNPJ and make sure no other customer uses it.
    """
    if not value:
        return None

    document = only_digits(value)
    if len(document) not in (11, 14):
        raise serializers.ValidationError(
            _("CPF deve ter 11 dígitos ou CNPJ deve ter 14 dígitos")
        )

    duplicates = User.objects.filter(cpf_cnpj=document)
    if instance is not None:
        duplicates = duplicates.exclude(pk=instance.pk)
    if duplicates.exists():
        raise serializers.ValidationError(
            _("Este CPF/CNPJ já está sendo usado por outro cliente")
        )
    return document


class UserRegistrationSerializer(serializers.ModelSerializer):
    """
    Serializer for customer registration.
    """

    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text=_("Password must be at least 8 characters long"),
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
    )
    email = serializers.EmailField()
    first_name = SanitizedCharField(max_length=150)
    last_name = SanitizedCharField(max_length=150, required=False, allow_blank=True)
    cpf_cnpj = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = User
        fields: ClassVar[list[str]] = [
            "email",
            "password",
            "password_confirm",
            "first_name",
            "last_name",
            "phone_number",
            "cpf_cnpj",
        ]

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(
                _("A user with this email already exists."),
            )
        return value.lower()

    def validate_password(self, value):
        try:
            validate_password(value)
        except ValidationError as e:
            raise serializers.ValidationError(list(e.messages)) from e
        return value

    def validate_cpf_cnpj(self, value):
        return normalize_cpf_cnpj(value)

    def validate(self, data):
        if data["password"] != data["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": _("Password confirmation doesn't match.")},
            )
        return data

    def create(self, validated_data):
        validated_data.pop("password_confirm")
        password = validated_data.pop("password")
        return User.objects.create_user(
            password=password,
            user_type=User.UserType.CUSTOMER,
            **validated_data,
        )


class UserProfileSerializer(BaseModelSerializer):
    """
    Serializer for the authenticated customer's own profile.
    Customer type and role are managed by staff and are read-only here.
    """

    email = serializers.EmailField(read_only=True)
    first_name = SanitizedCharField(max_length=150, required=False)
    last_name = SanitizedCharField(max_length=150, required=False, allow_blank=True)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    cpf_cnpj = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    full_name = serializers.CharField(read_only=True)
    customer_type = serializers.CharField(read_only=True)
    user_type = serializers.CharField(read_only=True)
    date_joined = serializers.DateTimeField(read_only=True)

    class Meta(BaseModelSerializer.Meta):
        model = User
        fields: ClassVar[list[str]] = [
            *BaseModelSerializer.Meta.fields,
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone_number",
            "cpf_cnpj",
            "customer_type",
            "user_type",
            "date_joined",
        ]

    def validate_cpf_cnpj(self, value):
        return normalize_cpf_cnpj(value, instance=self.instance)


class CustomerAddressSerializer(BaseModelSerializer):
    """Serializer for a customer's saved delivery addresses."""

    label = SanitizedCharField(max_length=50)
    recipient_name = SanitizedCharField(max_length=150)
    street = SanitizedCharField(max_length=255)
    complement = SanitizedCharField(max_length=100, required=False, allow_blank=True)
    neighborhood = SanitizedCharField(max_length=100)
    city = SanitizedCharField(max_length=100)
    zip_code = serializers.CharField(max_length=9)
    full_address = serializers.CharField(read_only=True)

    class Meta(BaseModelSerializer.Meta):
        model = CustomerAddress
        fields: ClassVar[list[str]] = [
            *BaseModelSerializer.Meta.fields,
            "label",
            "recipient_name",
            "street",
            "number",
            "complement",
            "neighborhood",
            "city",
            "state",
            "zip_code",
            "is_default",
            "full_address",
        ]

    def validate_zip_code(self, value):
        digits = only_digits(value)
        if len(digits) != 8:
            raise serializers.ValidationError(_("CEP deve ter 8 dígitos"))
        return digits
