# apps/orders/__init__.py

"""
Orders app: checkout orders, coupons and the order lifecycle.
"""
