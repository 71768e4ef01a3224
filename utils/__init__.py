# Shared helpers for the MarketHub backend

from .rbac import ROLE_ADMIN, ROLE_SELLER, ROLE_USER, is_admin, is_seller


__all__ = ["ROLE_ADMIN", "ROLE_SELLER", "ROLE_USER", "is_admin", "is_seller"]
