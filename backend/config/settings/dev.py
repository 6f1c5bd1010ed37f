"""
Development settings for the boatyard backend.
"""

from .base import *

# =============================================================================
# DEBUG
# =============================================================================
DEBUG = True

# =============================================================================
# ALLOWED HOSTS
# =============================================================================
ALLOWED_HOSTS = ['*']

# =============================================================================
# INSTALLED APPS - Development
# =============================================================================
INSTALLED_APPS += [
    'debug_toolbar',
    'django_extensions',
]

# =============================================================================
# MIDDLEWARE - Development
# =============================================================================
MIDDLEWARE = ['debug_toolbar.middleware.DebugToolbarMiddleware'] + MIDDLEWARE

# =============================================================================
# DEBUG TOOLBAR
# =============================================================================
INTERNAL_IPS = ['127.0.0.1', 'localhost']

DEBUG_TOOLBAR_CONFIG = {
    'SHOW_TOOLBAR_CALLBACK': lambda request: DEBUG and not request.path.startswith('/api/'),
    'DISABLE_PANELS': {
        'debug_toolbar.panels.profiling.ProfilingPanel',
    },
}

# =============================================================================
# EMAIL - Development (Console)
# =============================================================================
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# =============================================================================
# LOGGING - Development
# =============================================================================
LOGGING['root']['level'] = 'DEBUG'
LOGGING['loggers']['boatyard']['level'] = 'DEBUG'
LOGGING['loggers']['application']['level'] = 'DEBUG'

# =============================================================================
# CACHE - Development (no Redis required)
# =============================================================================
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'boatyard-dev-cache',
    }
}

# =============================================================================
# CELERY - Development Override (Filesystem broker, no Redis)
# =============================================================================
import os
CELERY_BROKER_URL = config('CELERY_BROKER_URL', default='filesystem://')
CELERY_RESULT_BACKEND = config('CELERY_RESULT_BACKEND', default='cache+memory://')
if CELERY_BROKER_URL == 'filesystem://':
    CELERY_BROKER_TRANSPORT_OPTIONS = {
        'data_folder_in': os.path.join(BASE_DIR, 'broker', 'out'),
        'data_folder_out': os.path.join(BASE_DIR, 'broker', 'out'),
        'data_folder_processed': os.path.join(BASE_DIR, 'broker', 'processed'),
    }
    # Create broker directories if they don't exist
    for folder in CELERY_BROKER_TRANSPORT_OPTIONS.values():
        os.makedirs(folder, exist_ok=True)
