import logging

from django.contrib.auth import get_user_model

# Canonical role names
ROLE_USER = "user"
ROLE_SELLER = "seller"
ROLE_ADMIN = "admin"

logger = logging.getLogger(__name__)


def _fetch_user_from_db(user):
    """Reload the role fields so a stale token claim is never trusted.

    Returns None for anonymous users.
    """
    if not getattr(user, "is_authenticated", False):
        return None
    User = get_user_model()
    return User.objects.only("id", "role", "is_superuser", "is_active").filter(pk=getattr(user, "pk", None)).first()


def is_admin(user) -> bool:
    """Admin check shared by permissions and services."""
    db_user = _fetch_user_from_db(user)
    if not db_user:
        return False
    return bool(db_user.is_superuser or db_user.role == ROLE_ADMIN)


def is_seller(user) -> bool:
    """Seller check; admins count as sellers."""
    db_user = _fetch_user_from_db(user)
    if not db_user:
        return False
    return db_user.role == ROLE_SELLER or is_admin(db_user)
