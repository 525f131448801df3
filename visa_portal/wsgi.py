"""
WSGI config for visa_portal project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'visa_portal.settings')

application = get_wsgi_application()
