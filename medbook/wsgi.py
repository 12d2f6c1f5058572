"""
WSGI config for the medbook project.

It exposes the WSGI callable as a module-level variable named ``application``.
The expiration sweeper is not started here; run ``manage.py run_sweeper``
next to WSGI workers.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'medbook.settings')

application = get_wsgi_application()
