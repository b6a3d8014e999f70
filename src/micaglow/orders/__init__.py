"""Orders: placement, tracking, dashboard and host order management."""
