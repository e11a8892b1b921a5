"""
Django app configuration for the quotes module.

This module defines the app configuration for the quotes app, which exposes
the aggregation engine over HTTP and the command line.

Version: 1.0
"""
from django.apps import AppConfig


class QuotesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'quotes'
