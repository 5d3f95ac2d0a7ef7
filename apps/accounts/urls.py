# apps/accounts/urls.py

"""
URL configuration for the accounts app.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from apps.accounts.views import (
    CustomerAddressViewSet,
    UserProfileViewSet,
    UserRegistrationView,
)

router = DefaultRouter()
router.register(r"addresses", CustomerAddressViewSet, basename="address")

app_name = "accounts"

urlpatterns = [
    path("register/", UserRegistrationView.as_view(), name="user-register"),
    path(
        "me/",
        UserProfileViewSet.as_view(
            {
                "get": "me",
                "put": "update_me",
                "patch": "update_me",
            },
        ),
        name="user-profile-me",
    ),
    path("", include(router.urls)),
]
