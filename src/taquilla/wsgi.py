"""WSGI config for the taquilla project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "taquilla.settings")

application = get_wsgi_application()
