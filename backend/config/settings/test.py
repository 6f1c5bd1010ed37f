"""
Test settings for the boatyard backend.
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['*']

# =============================================================================
# DATABASE - in-memory SQLite
# =============================================================================
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# =============================================================================
# SPEED
# =============================================================================
PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

# =============================================================================
# CELERY - run tasks inline
# =============================================================================
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# =============================================================================
# LOGGING - console only
# =============================================================================
for _logger in LOGGING['loggers'].values():
    _logger['handlers'] = ['console']
LOGGING['root']['level'] = 'WARNING'
