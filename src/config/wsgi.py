"""
WSGI config da loja.

Expõe o callable `application` para servidores WSGI (gunicorn, uwsgi).
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

application = get_wsgi_application()
