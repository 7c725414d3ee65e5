"""ASGI entry point for the mediaview project."""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'mediaview.settings')

application = get_asgi_application()
