import pytest
from django.contrib.auth import get_user_model

from authentication.domain.services.auth_service import AuthService
from marketplace.tests.factories import AdminFactory, UserFactory
from utils.rbac import is_admin, is_seller


User = get_user_model()


@pytest.mark.django_db
class TestAuthService:
    @pytest.fixture(autouse=True)
    def setup(self, db):
        self.service = AuthService()

    def registration(self, **overrides):
        data = {
            "username": "aung_ko",
            "email": "aung@example.com",
            "password": "secret12",
            "first_name": "Aung",
            "last_name": "Ko",
        }
        data.update(overrides)
        return data

    def test_register(self):
        result = self.service.register(self.registration(email=" Aung@Example.com "))

        assert result.success
        assert result.user.email == "aung@example.com"
        assert result.user.role == "user"
        assert result.access_token and result.refresh_token

    def test_register_duplicate_username_is_case_insensitive(self):
        UserFactory(username="Aung_Ko")

        result = self.service.register(self.registration())

        assert not result.success
        assert result.errors == {"username": "Username already taken"}

    def test_login_requires_both_fields(self):
        assert self.service.login("", "secret").error == "Email and password are required."

    def test_login_is_case_insensitive_on_email(self):
        UserFactory(email="mixed@example.com")

        result = self.service.login("MIXED@example.com", "password123")

        assert result.success
        assert result.message == "Login successful"

    def test_inactive_login(self):
        UserFactory(email="gone@example.com", is_active=False)

        result = self.service.login("gone@example.com", "password123")

        assert not result.success
        assert result.inactive

    def test_update_profile_whitelist(self):
        user = UserFactory()

        result = self.service.update_profile(user, {"bio": "Collector", "role": "admin", "is_staff": True})

        user.refresh_from_db()
        assert result.success
        assert result.data == {"updated": ["bio"]}
        assert user.bio == "Collector"
        assert user.role == "user"
        assert not user.is_staff

    def test_become_seller(self):
        user = UserFactory()

        result = self.service.become_seller(user)

        user.refresh_from_db()
        assert result.message == "Seller account activated"
        assert user.role == "seller"
        assert set(result.data) == {"access", "refresh"}

    def test_admin_already_sells(self):
        admin = AdminFactory()

        result = self.service.become_seller(admin)

        assert result.message == "You can already sell on MarketHub"
        admin.refresh_from_db()
        assert admin.role == "admin"


@pytest.mark.django_db
def test_rbac_helpers():
    assert is_seller(AdminFactory())
    assert is_admin(UserFactory(is_superuser=True))
    assert not is_seller(UserFactory())
