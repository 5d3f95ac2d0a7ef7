from decimal import Decimal

from apps.accounts.models import CustomerAddress, User
from apps.orders.models import Coupon, Order, OrderItem
from apps.products.models import Product


def make_user(email="maria@example.com", **kwargs):
    kwargs.setdefault("first_name", "Maria")
    kwargs.setdefault("last_name", "Silva")
    password = kwargs.pop("password", "s3nha-segura")
    return User.objects.create_user(email=email, password=password, **kwargs)


def make_address(user, **kwargs):
    fields = {
        "label": "Casa",
        "recipient_name": user.full_name,
        "street": "Rua das Flores",
        "number": "123",
        "neighborhood": "Centro",
        "city": "São Paulo",
        "state": "SP",
        "zip_code": "01001-000",
    }
    fields.update(kwargs)
    return CustomerAddress.objects.create(user=user, **fields)


def make_product(sku="HP-001", stock=10, retail="100.00", wholesale="80.00", **kwargs):
    kwargs.setdefault("name", f"Produto {sku}")
    return Product.objects.create(
        sku=sku,
        stock_quantity=stock,
        retail_price=Decimal(retail),
        wholesale_price=Decimal(wholesale),
        **kwargs,
    )


def make_order(user, lines=(), **kwargs):
    """Create an order for ``user`` with ``(product, quantity)`` lines."""
    subtotal = sum(
        (product.retail_price * quantity for product, quantity in lines),
        Decimal("0.00"),
    )
    kwargs.setdefault("customer_name", user.full_name)
    kwargs.setdefault("email", user.email)
    kwargs.setdefault("subtotal", subtotal)
    kwargs.setdefault("total_amount", subtotal)
    order = Order.objects.create(user=user, **kwargs)
    for product, quantity in lines:
        OrderItem.objects.create(
            order=order,
            product=product,
            quantity=quantity,
            unit_price=product.retail_price,
        )
    return order


def make_coupon(code="BEMVINDO10", **kwargs):
    kwargs.setdefault("name", "Boas-vindas")
    kwargs.setdefault("type", Coupon.CouponType.PERCENTAGE)
    kwargs.setdefault("value", Decimal("10.00"))
    return Coupon.objects.create(code=code, **kwargs)
