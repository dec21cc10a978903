"""
URL configuration for KeyLifecycleService project.
"""
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from core.views import HealthStoreView, HealthView, ReadyView

urlpatterns = [
    # Health check endpoints
    path("health/", HealthView.as_view(), name="health"),
    path("health/store/", HealthStoreView.as_view(), name="health-store"),
    path("ready/", ReadyView.as_view(), name="ready"),
    # API endpoints
    path("api/v1/keys/", include("api.v1.keys.urls", namespace="keys")),
    # OpenAPI Schema
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    # Swagger UI
    path(
        "api/docs/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    # ReDoc
    path(
        "api/redoc/",
        SpectacularRedocView.as_view(url_name="schema"),
        name="redoc",
    ),
]
