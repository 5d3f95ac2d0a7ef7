# apps/products/models.py

"""
Product catalog models for the storefront.

Products carry a retail and a wholesale price; wholesale customers are
charged the latter at checkout.
"""

from decimal import Decimal
from typing import ClassVar

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F
from django.utils.text import slugify
from django.utils.translation import gettext_lazy as _

from apps.core.models import AllObjectsManager, AuditStampedModelBase


class ProductManager(models.Manager):
    """Custom manager for Product model."""

    def available(self):
        """Products that may be sold on the storefront."""
        return self.get_queryset().filter(
            is_active=True, status=Product.Status.ACTIVE
        )

    def get_low_stock_products(self):
        return self.available().filter(stock_quantity__lte=F("min_stock"))


class Product(AuditStampedModelBase):
    """
    Product model representing items in the catalog.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", _("Ativo")
        INACTIVE = "inactive", _("Inativo")

    name = models.CharField(
        max_length=255,
        help_text=_("Product name"),
        db_index=True,
    )

    slug = models.SlugField(
        max_length=255,
        unique=True,
        help_text=_("URL-friendly product identifier"),
    )

    sku = models.CharField(
        max_length=100,
        unique=True,
        help_text=_("Stock Keeping Unit - unique product identifier"),
    )

    brand = models.CharField(max_length=100, blank=True, db_index=True)

    category = models.CharField(max_length=100, blank=True, db_index=True)

    description = models.TextField(blank=True)

    # Pricing
    retail_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Price charged to retail customers"),
    )

    wholesale_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Price charged to wholesale customers"),
    )

    cost_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Cost price for margin calculation"),
    )

    # Inventory
    stock_quantity = models.PositiveIntegerField(
        default=0,
        help_text=_("Current stock quantity"),
        db_index=True,
    )

    min_stock = models.PositiveIntegerField(
        default=5,
        help_text=_("Quantity threshold for low stock alerts"),
    )

    weight = models.DecimalField(
        max_digits=8,
        decimal_places=3,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.000"))],
        help_text=_("Product weight in kg"),
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )

    objects = ProductManager()
    all_objects = AllObjectsManager()

    class Meta:
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering: ClassVar[list] = ["name"]
        indexes: ClassVar[list] = [
            models.Index(fields=["status", "is_active"], name="products_pr_status_3f1c2a_idx"),
            models.Index(fields=["brand", "status"], name="products_pr_brand_8d0e4b_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            base_slug = slugify(self.name) or slugify(self.sku)
            slug = base_slug
            counter = 1
            while Product.all_objects.exclude(id=self.id).filter(slug=slug).exists():
                slug = f"{base_slug}-{counter}"
                counter += 1
            self.slug = slug
        super().save(*args, **kwargs)

    def clean(self):
        if (
            self.wholesale_price is not None
            and self.retail_price is not None
            and self.wholesale_price > self.retail_price
        ):
            raise ValidationError(
                _("Wholesale price cannot be higher than the retail price."),
            )

    @property
    def is_available(self) -> bool:
        return self.is_active and self.status == self.Status.ACTIVE

    @property
    def is_in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.min_stock

    def price_for(self, user) -> Decimal:
        """Unit price charged to the given customer."""
        if getattr(user, "is_wholesale", False):
            return self.wholesale_price
        return self.retail_price

    def reduce_stock(self, quantity: int) -> bool:
        """
        Atomically reduce stock by the specified amount.
        Returns True if successful, False if insufficient stock.
        """
        updated = Product.all_objects.filter(
            pk=self.pk, stock_quantity__gte=quantity
        ).update(stock_quantity=F("stock_quantity") - quantity)
        if updated:
            self.refresh_from_db(fields=["stock_quantity"])
        return bool(updated)

    def increase_stock(self, quantity: int) -> None:
        """Atomically increase stock by the specified amount."""
        Product.all_objects.filter(pk=self.pk).update(
            stock_quantity=F("stock_quantity") + quantity
        )
        self.refresh_from_db(fields=["stock_quantity"])
