"""Settings for the test suite: SQLite, local-memory cache, no throttling."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from decouple import config  # noqa: E402
from dj_database_url import parse as db_url  # noqa: E402

from .settings import *  # noqa: E402,F401,F403

# Point TEST_DATABASE_URL at PostgreSQL or MySQL to exercise row locking.
DATABASES = {
    "default": config(
        "TEST_DATABASE_URL", default="sqlite://:memory:", cast=db_url
    )
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "marketplace-tests",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_CLASSES": [],
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
