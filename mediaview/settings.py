"""
Django settings for the mediaview project.

Everything deployment specific comes from the environment.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'mediaview-insecure-development-key')

DEBUG = os.environ.get('DJANGO_DEBUG', '1') == '1'

ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',') if h]

INSTALLED_APPS = [
    'browse',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'mediaview.urls'

WSGI_APPLICATION = 'mediaview.wsgi.application'
ASGI_APPLICATION = 'mediaview.asgi.application'

DATABASES = {}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = False
USE_TZ = True

# Media browsing
MEDIA_FOLDER = Path(os.environ.get('MEDIA_DIR', BASE_DIR / 'media')).resolve()
THUMBNAIL_FOLDER = Path(os.environ.get('THUMBNAIL_DIR', BASE_DIR / 'thumbnails')).resolve()
THUMBNAIL_SIZE = int(os.environ.get('THUMBNAIL_SIZE', '320'))
THUMBNAIL_CONCURRENCY = int(os.environ.get('THUMBNAIL_CONCURRENCY', '8'))

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s [%(levelname)-7s] %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'browse': {'handlers': ['console'], 'level': os.environ.get('MEDIAVIEW_LOG_LEVEL', 'INFO')},
        'common': {'handlers': ['console'], 'level': os.environ.get('MEDIAVIEW_LOG_LEVEL', 'INFO')},
        'mediaview': {'handlers': ['console'], 'level': os.environ.get('MEDIAVIEW_LOG_LEVEL', 'INFO')},
    },
}
