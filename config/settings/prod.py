# config/settings/prod.py
from .base import *  # noqa

DEBUG = False

CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",") if o.strip()  # noqa: F405
]
CORS_ALLOW_CREDENTIALS = True

SIMPLE_JWT["AUTH_COOKIE_SECURE"] = True  # noqa: F405
SIMPLE_JWT["AUTH_COOKIE_SAMESITE"] = "Lax"  # noqa: F405

LOGGING["root"]["level"] = os.getenv("DJANGO_LOG_LEVEL", "WARNING")  # noqa: F405
