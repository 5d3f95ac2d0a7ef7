# apps/accounts/models.py

from typing import ClassVar

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models, transaction
from django.utils.translation import gettext_lazy as _

from apps.accounts.managers import UserManager
from apps.core.models import AuditStampedModelBase
from apps.core.utils import only_digits


class User(AuditStampedModelBase, AbstractUser):
    """
    Custom User model that extends Django's AbstractUser.
    A storefront customer logs in with their email address.
    """

    class UserType(models.TextChoices):
        CUSTOMER = "CUSTOMER", _("Customer")
        ADMIN = "ADMIN", _("Admin")
        STAFF = "STAFF", _("Staff")

    class CustomerType(models.TextChoices):
        RETAIL = "retail", _("Varejo")
        WHOLESALE = "wholesale", _("Atacado")

    email = models.EmailField(_("email address"), unique=True, db_index=True)
    username = models.CharField(
        _("username"),
        max_length=150,
        unique=True,
        help_text=_("Not used for login. Only for internal reference."),
        blank=True,
        null=True,
    )
    user_type = models.CharField(
        max_length=20,
        choices=UserType.choices,
        default=UserType.CUSTOMER,
        help_text=_("The type of user role"),
    )
    customer_type = models.CharField(
        max_length=20,
        choices=CustomerType.choices,
        default=CustomerType.RETAIL,
        help_text=_("Wholesale customers are charged wholesale prices"),
    )
    cpf_cnpj = models.CharField(
        _("CPF/CNPJ"),
        max_length=14,
        unique=True,
        blank=True,
        null=True,
        validators=[
            RegexValidator(
                regex=r"^(\d{11}|\d{14})$",
                message="CPF must have 11 digits or CNPJ must have 14 digits.",
            ),
        ],
        help_text=_("Tax document, digits only"),
    )
    phone_number = models.CharField(
        max_length=20,
        blank=True,
        validators=[
            RegexValidator(
                regex=r"^\+?\d{10,15}$",
                message="Phone number must be entered in the format: '+5511999999999'. Up to 15 digits allowed.",
            ),
        ],
        help_text=_("Contact phone number"),
    )

    USERNAME_FIELD: ClassVar[str] = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = ["first_name", "last_name"]

    objects = UserManager()

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering: ClassVar[list[str]] = ["-date_joined"]

    def __str__(self):
        return self.get_full_name() or self.email

    def save(self, *args, **kwargs):
        if self.cpf_cnpj:
            self.cpf_cnpj = only_digits(self.cpf_cnpj)
        else:
            self.cpf_cnpj = None
        super().save(*args, **kwargs)

    @property
    def full_name(self):
        """Return the user's full name."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_wholesale(self):
        return self.customer_type == self.CustomerType.WHOLESALE

    def is_customer(self):
        """Check if user is a customer."""
        return self.user_type == self.UserType.CUSTOMER

    def is_admin_user(self):
        """Check if user is an admin (different from Django's is_superuser)."""
        return self.user_type == self.UserType.ADMIN or self.is_superuser


class CustomerAddress(AuditStampedModelBase):
    """A delivery address saved by a customer."""

    class State(models.TextChoices):
        AC = "AC", "Acre"
        AL = "AL", "Alagoas"
        AP = "AP", "Amapá"
        AM = "AM", "Amazonas"
        BA = "BA", "Bahia"
        CE = "CE", "Ceará"
        DF = "DF", "Distrito Federal"
        ES = "ES", "Espírito Santo"
        GO = "GO", "Goiás"
        MA = "MA", "Maranhão"
        MT = "MT", "Mato Grosso"
        MS = "MS", "Mato Grosso do Sul"
        MG = "MG", "Minas Gerais"
        PA = "PA", "Pará"
        PB = "PB", "Paraíba"
        PR = "PR", "Paraná"
        PE = "PE", "Pernambuco"
        PI = "PI", "Piauí"
        RJ = "RJ", "Rio de Janeiro"
        RN = "RN", "Rio Grande do Norte"
        RS = "RS", "Rio Grande do Sul"
        RO = "RO", "Rondônia"
        RR = "RR", "Roraima"
        SC = "SC", "Santa Catarina"
        SP = "SP", "São Paulo"
        SE = "SE", "Sergipe"
        TO = "TO", "Tocantins"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    label = models.CharField(max_length=50, help_text=_("e.g. Casa, Trabalho"))
    recipient_name = models.CharField(max_length=150)
    street = models.CharField(max_length=255)
    number = models.CharField(max_length=20)
    complement = models.CharField(max_length=100, blank=True)
    neighborhood = models.CharField(max_length=100)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=2, choices=State.choices)
    zip_code = models.CharField(
        max_length=8,
        validators=[RegexValidator(regex=r"^\d{8}$", message="CEP must have 8 digits.")],
    )
    is_default = models.BooleanField(default=False)

    class Meta:
        verbose_name = _("Customer Address")
        verbose_name_plural = _("Customer Addresses")
        ordering: ClassVar[list[str]] = ["-is_default", "-created_at"]

    def __str__(self):
        return f"{self.label} - {self.street}, {self.number} ({self.city}/{self.state})"

    @property
    def full_address(self):
        parts = [
            f"{self.street}, {self.number}",
            self.complement,
            self.neighborhood,
            f"{self.city}/{self.state}",
            self.formatted_zip_code,
        ]
        return " - ".join(part for part in parts if part)

    @property
    def formatted_zip_code(self):
        return f"{self.zip_code[:5]}-{self.zip_code[5:]}" if self.zip_code else ""

    def save(self, *args, **kwargs):
        self.zip_code = only_digits(self.zip_code)
        with transaction.atomic():
            if self.is_default:
                CustomerAddress.objects.filter(user=self.user, is_default=True).exclude(
                    pk=self.pk
                ).update(is_default=False)
            elif not CustomerAddress.objects.filter(user=self.user).exclude(pk=self.pk).exists():
                self.is_default = True
            super().save(*args, **kwargs)
