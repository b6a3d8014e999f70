"""Test settings for MicaGlow project."""

from .base import *  # noqa: F401,F403

SECRET_KEY = "test-secret-key-not-for-production"
DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

CHANNEL_LAYERS = {
    "default": {
        "BACKEND": "channels.layers.InMemoryChannelLayer",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

STORAGE_URL = "https://storage.example.test"
STORAGE_API_KEY = "test-storage-key"

INDIVIDUAL_SHIPPING_FEE = Decimal("150.00")  # noqa: F405
STORAGE_DEFAULT_BUCKET = "product-images"
STORAGE_ALLOWED_BUCKETS = ["product-images", "batch-images"]
STORE_WHATSAPP_NUMBER = "639154901224"
