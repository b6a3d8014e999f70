"""WSGI config for MicaGlow project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "micaglow.settings.prod")

application = get_wsgi_application()
