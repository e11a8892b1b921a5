"""
URL configuration for the SwapScout project.
"""
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from quotes.views import HealthView

urlpatterns = [
    path("health", HealthView.as_view(), name="health"),
    path("api/", include("quotes.urls")),  # Quote API

    # API Documentation
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),  # API schema
    path(
        "api/docs/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),  # Swagger UI
    path(
        "api/redoc/",
        SpectacularRedocView.as_view(url_name="schema"),
        name="redoc",
    ),  # ReDoc UI
]
