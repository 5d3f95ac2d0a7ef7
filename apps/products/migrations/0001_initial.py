import uuid
from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="When this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="When this record was last updated")),
                ("is_active", models.BooleanField(default=True, help_text="Whether this record is active")),
                ("name", models.CharField(db_index=True, help_text="Product name", max_length=255)),
                ("slug", models.SlugField(help_text="URL-friendly product identifier", max_length=255, unique=True)),
                (
                    "sku",
                    models.CharField(
                        help_text="Stock Keeping Unit - unique product identifier",
                        max_length=100,
                        unique=True,
                    ),
                ),
                ("brand", models.CharField(blank=True, db_index=True, max_length=100)),
                ("category", models.CharField(blank=True, db_index=True, max_length=100)),
                ("description", models.TextField(blank=True)),
                (
                    "retail_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Price charged to retail customers",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "wholesale_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Price charged to wholesale customers",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "cost_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Cost price for margin calculation",
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "stock_quantity",
                    models.PositiveIntegerField(db_index=True, default=0, help_text="Current stock quantity"),
                ),
                (
                    "min_stock",
                    models.PositiveIntegerField(default=5, help_text="Quantity threshold for low stock alerts"),
                ),
                (
                    "weight",
                    models.DecimalField(
                        blank=True,
                        decimal_places=3,
                        help_text="Product weight in kg",
                        max_digits=8,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.000"))],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Ativo"), ("inactive", "Inativo")],
                        db_index=True,
                        default="active",
                        max_length=20,
                    ),
                ),
            ],
            options={
                "verbose_name": "Product",
                "verbose_name_plural": "Products",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["status", "is_active"], name="products_pr_status_3f1c2a_idx"),
                    models.Index(fields=["brand", "status"], name="products_pr_brand_8d0e4b_idx"),
                ],
            },
        ),
    ]
