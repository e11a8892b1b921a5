"""
URL patterns for the quotes app.

This module defines the URL routing configuration for the SwapScout quotes API.

Version: 1.0
"""
from django.urls import path

from .views import AggregatorListView, QuoteAPIView

app_name = "quotes"

urlpatterns = [
    path("quote", QuoteAPIView.as_view(), name="quote"),
    path("aggregators", AggregatorListView.as_view(), name="aggregators"),
]
