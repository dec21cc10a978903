"""
URL configuration for key API endpoints.
"""

from django.urls import path

from api.v1.keys import views

app_name = "keys"

urlpatterns = [
    path(
        "generate",
        views.GenerateKeyView.as_view(),
        name="generate-key",
    ),
    path(
        "verify",
        views.VerifyKeyView.as_view(),
        name="verify-key",
    ),
    path(
        "renew",
        views.RenewKeyView.as_view(),
        name="renew-key",
    ),
    path(
        "cleanup",
        views.CleanupKeysView.as_view(),
        name="cleanup-keys",
    ),
]
