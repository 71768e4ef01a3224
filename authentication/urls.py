from authentication.api.urls.auth_urls import urlpatterns


__all__ = ["urlpatterns"]
