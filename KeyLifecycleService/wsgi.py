"""
WSGI config for KeyLifecycleService project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "KeyLifecycleService.settings.prod")

application = get_wsgi_application()
