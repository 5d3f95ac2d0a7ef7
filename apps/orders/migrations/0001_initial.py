import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def audit_fields():
    return [
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
    ]


def money_field(**kwargs):
    return models.DecimalField(decimal_places=2, max_digits=10, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("accounts", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Coupon",
            fields=[
                *audit_fields(),
                ("code", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(blank=True, max_length=100)),
                ("description", models.TextField(blank=True)),
                (
                    "type",
                    models.CharField(
                        choices=[("percentage", "Percentual"), ("fixed", "Valor fixo")],
                        max_length=20,
                    ),
                ),
                (
                    "value",
                    money_field(
                        help_text="Percentage (0-100) or fixed amount in reais",
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("min_order_value", money_field(blank=True, help_text="Minimum order subtotal required", null=True)),
                ("max_discount", money_field(blank=True, help_text="Cap for percentage discounts", null=True)),
                (
                    "usage_limit",
                    models.PositiveIntegerField(blank=True, help_text="Total redemptions allowed", null=True),
                ),
                ("used_count", models.PositiveIntegerField(default=0)),
                ("start_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("end_date", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "orders_coupon",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                *audit_fields(),
                (
                    "order_number",
                    models.CharField(
                        help_text="Unique order number for customer reference",
                        max_length=20,
                        unique=True,
                    ),
                ),
                ("customer_name", models.CharField(blank=True, max_length=255)),
                ("customer_type", models.CharField(default="retail", max_length=20)),
                ("email", models.EmailField(blank=True, help_text="Contact email for this order", max_length=254)),
                ("phone_number", models.CharField(blank=True, max_length=20)),
                ("shipping_recipient_name", models.CharField(blank=True, max_length=150)),
                ("shipping_street", models.CharField(blank=True, max_length=255)),
                ("shipping_number", models.CharField(blank=True, max_length=20)),
                ("shipping_complement", models.CharField(blank=True, max_length=100)),
                ("shipping_neighborhood", models.CharField(blank=True, max_length=100)),
                ("shipping_city", models.CharField(blank=True, max_length=100)),
                ("shipping_state", models.CharField(blank=True, max_length=2)),
                ("shipping_zip_code", models.CharField(blank=True, max_length=8)),
                ("shipping_method", models.CharField(default="standard", max_length=50)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pendente"),
                            ("confirmed", "Confirmado"),
                            ("processing", "Em preparação"),
                            ("shipped", "Enviado"),
                            ("delivered", "Entregue"),
                            ("cancelled", "Cancelado"),
                        ],
                        default="pending",
                        help_text="Current order status",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pendente"),
                            ("approved", "Aprovado"),
                            ("authorized", "Autorizado"),
                            ("processing", "Em processamento"),
                            ("in_mediation", "Em mediação"),
                            ("rejected", "Recusado"),
                            ("cancelled", "Cancelado"),
                            ("refunded", "Reembolsado"),
                            ("charged_back", "Estornado"),
                            ("paid", "Pago"),
                        ],
                        default="pending",
                        help_text="Current payment status",
                        max_length=20,
                    ),
                ),
                (
                    "payment_external_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Checkout preference id, then the gateway payment id",
                        max_length=100,
                    ),
                ),
                ("payment_method", models.CharField(blank=True, max_length=50)),
                (
                    "payment_details",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Summary of the last payment reported by the gateway",
                    ),
                ),
                ("subtotal", money_field(default=Decimal("0.00"))),
                ("discount_amount", money_field(default=Decimal("0.00"))),
                ("shipping_cost", money_field(default=Decimal("0.00"))),
                ("total_amount", money_field(default=Decimal("0.00"))),
                ("stock_committed", models.BooleanField(default=False)),
                ("tracking_number", models.CharField(blank=True, max_length=100)),
                ("carrier", models.CharField(blank=True, max_length=100)),
                ("shipped_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, help_text="Internal notes about the order")),
                ("customer_notes", models.TextField(blank=True)),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Customer who placed the order",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "shipping_address",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="accounts.customeraddress",
                    ),
                ),
                (
                    "coupon",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="orders.coupon",
                    ),
                ),
            ],
            options={
                "db_table": "orders_order",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_orde_status_idx"),
                    models.Index(fields=["payment_status"], name="orders_orde_paystat_idx"),
                    models.Index(fields=["created_at"], name="orders_orde_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                *audit_fields(),
                ("product_name", models.CharField(max_length=255)),
                ("product_sku", models.CharField(max_length=100)),
                (
                    "quantity",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                (
                    "unit_price",
                    money_field(
                        help_text="Price per unit at time of order",
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("total_price", money_field(help_text="Total price for this line item")),
                (
                    "order",
                    models.ForeignKey(
                        help_text="Order this item belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        help_text="Product that was ordered",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_items",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "db_table": "orders_order_item",
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="CouponUsage",
            fields=[
                *audit_fields(),
                ("discount_amount", money_field()),
                (
                    "coupon",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="usages",
                        to="orders.coupon",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="coupon_usages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="coupon_usages",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "orders_coupon_usage",
                "constraints": [
                    models.UniqueConstraint(fields=("coupon", "user"), name="unique_coupon_usage_per_user"),
                ],
            },
        ),
    ]
