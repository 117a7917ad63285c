"""WSGI entry point for the reward economy engine."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "reward_economy.settings")

application = get_wsgi_application()
