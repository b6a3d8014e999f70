"""Store module for e-commerce functionality.

Provides the product catalog, the session cart and individual checkout.
Pooled purchases live in micaglow.groupbuy and micaglow.orders.
"""
