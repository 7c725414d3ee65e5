"""WSGI entry point for the mediaview project."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'mediaview.settings')

application = get_wsgi_application()
