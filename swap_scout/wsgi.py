"""
WSGI config for the SwapScout project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "swap_scout.settings")

application = get_wsgi_application()
