# config/settings/local.py
import os

from .base import *  # noqa

DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"

# No DB_NAME in the environment -> throwaway SQLite file (dev + test runs).
if not os.getenv("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",  # noqa: F405
        }
    }
