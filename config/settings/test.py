from .base import *  # noqa
from .base import BASE_DIR
from .base import REST_FRAMEWORK as BASE_REST_FRAMEWORK

# Test settings: force SQLite unless a postgres run is requested explicitly
DEBUG = False

if DB_ENGINE.lower() != "postgres":  # noqa: F405
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "test_db.sqlite3",
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Plain storage so tests do not need collectstatic
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Run background tasks inline; task failures are logged by the tasks themselves
CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

# No real pauses between Shopify calls
SHOPIFY_SYNC_DELAY_SECONDS = 0

WAREHOUSE_WEBHOOK_SECRET = "test-warehouse-secret"
PORTAL_WEBHOOK_URL = ""
PORTAL_WEBHOOK_SECRET = ""

# Relax throttling for tests to reduce flakiness
REST_FRAMEWORK = {**BASE_REST_FRAMEWORK}
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    **BASE_REST_FRAMEWORK.get("DEFAULT_THROTTLE_RATES", {}),
    "user": "10000/min",
    "anon": "10000/min",
    "signin": "1000/min",
    "warehouse": "10000/min",
    "warehouse_write": "10000/min",
    "scanning": "10000/min",
    "webhooks": "10000/min",
    "portal": "10000/min",
}
