"""
Settings package.

With DJANGO_SETTINGS_MODULE=config.settings, DJANGO_ENV selects the
environment module: development (default), test or production. When an
environment module is named directly (config.settings.test under pytest)
nothing is loaded here, so that module's own defaults apply first.
"""

import os

from django.core.exceptions import ImproperlyConfigured

DJANGO_ENV = os.environ.get("DJANGO_ENV", "development")
SELECTED_BY_ENV = os.environ.get("DJANGO_SETTINGS_MODULE", __name__) == __name__

if SELECTED_BY_ENV:
    if DJANGO_ENV == "production":
        from .production import *  # noqa
    elif DJANGO_ENV == "test":
        from .test import *  # noqa
    elif DJANGO_ENV == "development":
        from .development import *  # noqa
    else:
        raise ImproperlyConfigured(f"Unknown DJANGO_ENV {DJANGO_ENV!r}")
