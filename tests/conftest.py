import os

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "swap_scout.settings")
os.environ.setdefault("THROTTLE_RATE_ANON", "10000/minute")
django.setup()
