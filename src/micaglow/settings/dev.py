"""Development settings for MicaGlow project."""

from .base import *  # noqa: F401,F403

DEBUG = True

SECRET_KEY = os.environ.get("SECRET_KEY", "dev-insecure-secret-key")  # noqa: F405

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

# Local memory cache so development does not require Redis
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}
