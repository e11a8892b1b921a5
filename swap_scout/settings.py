import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Build paths
BASE_DIR = Path(__file__).resolve().parent.parent

# Security settings
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "your-secret-key-here")
DEBUG = os.getenv("DJANGO_DEBUG", "True") == "True"

# When in DEBUG mode, allow all hosts for ease of development
if DEBUG:
    ALLOWED_HOSTS = ["*"]
else:
    ALLOWED_HOSTS = os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")

# Application definition
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    # Third party apps
    "rest_framework",
    "corsheaders",
    "drf_spectacular",  # OpenAPI 3.0 schema generator
    # Local apps
    "aggregator",  # Quote aggregation engine
    "venues",  # Venue adapters
    "quotes",  # Quote API
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Custom middleware
    "swap_scout.middleware.SecurityHeadersMiddleware",
    "swap_scout.middleware.RequestIDMiddleware",
    "swap_scout.middleware.RequestLoggingMiddleware",
]

# CORS settings
if DEBUG:
    CORS_ALLOW_ALL_ORIGINS = True  # Only in development
else:
    CORS_ALLOW_ALL_ORIGINS = False
    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    CORS_ALLOW_METHODS = ["GET", "OPTIONS"]

ROOT_URLCONF = "swap_scout.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "swap_scout.wsgi.application"

# No models of our own; SQLite keeps contrib.auth and management commands happy
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Django cache (used by DRF throttling); quote results use the engine's own cache
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "swapscout",
    },
}

# Venues queried by the aggregator, in priority order. Ties between equal
# output amounts go to the earlier entry.
SWAP_VENUES = [
    "venues.openocean.integration.OpenOceanVenue",
    "venues.kyberswap.integration.KyberSwapVenue",
    "venues.zerox.integration.ZeroXVenue",
    "venues.mace.integration.MaceVenue",
]

# Aggregator settings
QUOTE_VENUE_TIMEOUT = float(os.getenv("QUOTE_VENUE_TIMEOUT", "8"))  # seconds per venue
QUOTE_CACHE_TTL = float(os.getenv("QUOTE_CACHE_TTL", "5"))  # seconds
QUOTE_CACHE_MAX_ENTRIES = int(os.getenv("QUOTE_CACHE_MAX_ENTRIES", "100"))
QUOTE_DEFAULT_SLIPPAGE_BPS = int(os.getenv("QUOTE_DEFAULT_SLIPPAGE_BPS", "50"))  # used when a request omits slippage

# REST Framework settings
REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "UNAUTHENTICATED_USER": None,
    # Add throttling for rate limiting
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": os.getenv("THROTTLE_RATE_ANON", "120/minute"),
    },
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "EXCEPTION_HANDLER": "rest_framework.views.exception_handler",
}

# DRF Spectacular settings
SPECTACULAR_SETTINGS = {
    "TITLE": "SwapScout API",
    "DESCRIPTION": "API for comparing token swap quotes across venues",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SWAGGER_UI_SETTINGS": {
        "deepLinking": True,
        "displayOperationId": True,
        "docExpansion": "list",
        "filter": True,
    },
    "SORT_OPERATIONS": False,
}

# Logging configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "json": {
            "()": "json_log_formatter.JSONFormatter",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
        "json_file": {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": os.path.join(BASE_DIR, "logs/swapscout.json"),
            "when": "midnight",
            "interval": 1,
            "backupCount": 30,
            "formatter": "json",
        },
        "error_file": {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": os.path.join(BASE_DIR, "logs/error.log"),
            "when": "midnight",
            "interval": 1,
            "backupCount": 30,
            "formatter": "verbose",
            "level": "ERROR",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console", "json_file"],
            "level": "INFO",
        },
        "django.request": {
            "handlers": ["console", "error_file"],
            "level": "ERROR",
            "propagate": False,
        },
        "swap_scout": {
            "handlers": ["console", "json_file"],
            "level": "INFO",
            "propagate": False,
        },
        "aggregator": {
            "handlers": ["console", "json_file"],
            "level": os.getenv("AGGREGATOR_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "venues": {
            "handlers": ["console", "json_file"],
            "level": os.getenv("VENUES_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "quotes": {
            "handlers": ["console", "json_file"],
            "level": "INFO",
            "propagate": False,
        },
    },
    "root": {
        "handlers": ["console", "error_file"],
        "level": os.getenv("DJANGO_LOG_LEVEL", "WARNING"),
    },
}

# Security settings for production
if not DEBUG:
    SECURE_SSL_REDIRECT = os.getenv("DJANGO_SECURE_SSL_REDIRECT", "True") == "True"
    SECURE_HSTS_SECONDS = 31536000  # 1 year
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
    SECURE_CONTENT_TYPE_NOSNIFF = True
    SECURE_REFERRER_POLICY = "strict-origin-when-cross-origin"

# Ensure we have a logs directory
os.makedirs(os.path.join(BASE_DIR, "logs"), exist_ok=True)
